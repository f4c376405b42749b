"""Commands of the host and its plugins, grouped by publisher."""

from __future__ import annotations

from .entry import CommandEntry
from .errors import AmbiguousCommandError, DuplicateCommandError, UnknownCommandError


class CommandRegistry:
    """Map ``group -> name -> entry``; bare names resolve while they are unique."""

    def __init__(self) -> None:
        self._groups: dict[str, dict[str, CommandEntry]] = {}

    def add(self, entry: CommandEntry) -> CommandEntry:
        commands = self._groups.setdefault(entry.group, {})
        if entry.name in commands:
            owner = commands[entry.name].origin
            raise DuplicateCommandError(
                f"{entry.qualified_name} is already provided by {owner}"
            )
        commands[entry.name] = entry
        return entry

    def __contains__(self, qualified_name: str) -> bool:
        group, _, name = qualified_name.partition(":")
        return name in self._groups.get(group, {})

    def lookup(self, token: str) -> CommandEntry:
        """Find ``group:name`` exactly, or a bare ``name`` across every group."""

        if ":" in token:
            group, _, name = token.partition(":")
            entry = self._groups.get(group, {}).get(name)
            if entry is None:
                raise UnknownCommandError(f"Unknown command: {token}")
            return entry
        matches = self._named(token)
        if not matches:
            raise UnknownCommandError(f"Unknown command: {token}")
        if len(matches) > 1:
            raise AmbiguousCommandError(token, [entry.qualified_name for entry in matches])
        return matches[0]

    def label_for(self, entry: CommandEntry) -> str:
        """The shortest name that still resolves to ``entry``."""

        if len(self._named(entry.name)) > 1:
            return entry.qualified_name
        return entry.name

    def labels(self) -> tuple[str, ...]:
        return tuple(sorted(self.label_for(entry) for entry in self.entries()))

    def entries(self) -> tuple[CommandEntry, ...]:
        return tuple(
            self._groups[group][name]
            for group in sorted(self._groups)
            for name in sorted(self._groups[group])
        )

    def _named(self, name: str) -> list[CommandEntry]:
        return [
            commands[name] for group, commands in sorted(self._groups.items()) if name in commands
        ]
