"""A command class as published under ``group:name``."""

from __future__ import annotations

from dataclasses import dataclass

BUILTIN_ORIGIN = "builtin"


def _valid_segment(value: str) -> bool:
    return bool(value) and ":" not in value


@dataclass(frozen=True)
class CommandEntry:
    group: str
    name: str
    command: type
    origin: str = BUILTIN_ORIGIN

    def __post_init__(self) -> None:
        invalid = [
            label for label in ("group", "name", "origin") if not _valid_segment(getattr(self, label))
        ]
        if invalid:
            raise ValueError(
                f"command entry {self.group!r}:{self.name!r} has an empty or ':'-containing "
                f"{' and '.join(invalid)}"
            )
        if not isinstance(self.command, type):
            raise TypeError(f"{self.command!r} is not a command class")

    @classmethod
    def from_command(cls, command: type, *, origin: str = BUILTIN_ORIGIN) -> "CommandEntry":
        """Read the ``@typhcommand`` metadata of ``command``."""

        metadata = getattr(command, "__typh_feature__", None)
        if metadata is None:
            raise TypeError(f"{command.__name__} is not decorated with @typhcommand")
        return cls(
            group=str(metadata["group"]),
            name=str(metadata["name"]),
            command=command,
            origin=origin,
        )

    @property
    def qualified_name(self) -> str:
        return f"{self.group}:{self.name}"

    @property
    def builtin(self) -> bool:
        return self.origin == BUILTIN_ORIGIN
