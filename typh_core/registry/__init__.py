"""Command registry shared by the host and plugins."""

from .entry import BUILTIN_ORIGIN, CommandEntry
from .errors import (
    AmbiguousCommandError,
    CommandRegistryError,
    DuplicateCommandError,
    UnknownCommandError,
)
from .registry import CommandRegistry

__all__ = [
    "AmbiguousCommandError",
    "BUILTIN_ORIGIN",
    "CommandEntry",
    "CommandRegistry",
    "CommandRegistryError",
    "DuplicateCommandError",
    "UnknownCommandError",
]
