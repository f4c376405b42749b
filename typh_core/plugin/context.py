"""Runtime context shared with plugins."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from typh_core.events import EventBus
from typh_core.registry import CommandEntry, CommandRegistry

from .base import PluginInfo


@dataclass(frozen=True)
class PluginContext:
    """Information surfaced to plugins when they are bound to the host."""

    info: PluginInfo
    project_root: Path | None
    registry: CommandRegistry
    events: EventBus
    logger: logging.Logger

    def register_command(self, command: type) -> None:
        self.registry.add(CommandEntry.from_command(command, origin=self.info.name))
