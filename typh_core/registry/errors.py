"""Lookup and registration failures of the command registry."""

from __future__ import annotations

from typing import Sequence

from typh_core.errors import TyphonError


class CommandRegistryError(TyphonError):
    pass


class DuplicateCommandError(CommandRegistryError):
    pass


class UnknownCommandError(CommandRegistryError):
    pass


class AmbiguousCommandError(CommandRegistryError):
    """A bare command name is published by more than one group."""

    def __init__(self, name: str, candidates: Sequence[str]) -> None:
        self.name = name
        self.candidates = tuple(candidates)
        super().__init__(f"{name} is provided by {', '.join(self.candidates)}")
