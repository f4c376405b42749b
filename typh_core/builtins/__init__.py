"""Register the built-in Typhon commands."""

from __future__ import annotations

from typing import Sequence

from typh_core.registry import CommandEntry, CommandRegistry

from .commands import (
    BuildCommand,
    CacheCommand,
    PluginListCommand,
    PluginTestCommand,
    RunCommand,
)

__all__ = ["register_builtin_commands"]

_BUILTIN_COMMANDS: Sequence[type] = (
    BuildCommand,
    RunCommand,
    CacheCommand,
    PluginTestCommand,
    PluginListCommand,
)


def register_builtin_commands(registry: CommandRegistry) -> None:
    for command in _BUILTIN_COMMANDS:
        registry.add(CommandEntry.from_command(command))
