"""The interface every Typhon plugin implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from typh_core.events import Event, EventResult

if TYPE_CHECKING:
    from .context import PluginContext


@dataclass(frozen=True)
class PluginInfo:
    name: str
    version: str


class TyphonPlugin(ABC):
    """Base class for plugins observing (and possibly cancelling) pipeline events."""

    def __init__(self, info: PluginInfo) -> None:
        self._info = info
        self.context: "PluginContext | None" = None

    @property
    def info(self) -> PluginInfo:
        return self._info

    def bind(self, context: "PluginContext") -> None:
        self.context = context

    @abstractmethod
    def load(self) -> None:
        """Prepare the plugin; called once before it receives events."""

    def on_event(self, event: Event) -> EventResult | None:
        return EventResult.CONTINUE

    def register_command(self, command: type[Any]) -> None:
        """Publish a command class through the host's feature registry."""
        if self.context is None:
            raise RuntimeError(f"plugin {self.info.name} is not bound to a host")
        self.context.register_command(command)


def satisfies_plugin_interface(candidate: object) -> bool:
    if isinstance(candidate, TyphonPlugin):
        return True
    info = getattr(candidate, "info", None)
    return (
        callable(getattr(candidate, "load", None))
        and callable(getattr(candidate, "on_event", None))
        and isinstance(getattr(info, "name", None), str)
    )
