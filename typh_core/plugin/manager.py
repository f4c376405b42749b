"""Plugin registration, loading, and event dispatch."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from typh_core.events import TEST_EVENT, Event, EventBus, EventResult, TestEvent
from typh_core.registry import CommandRegistry

from .base import satisfies_plugin_interface
from .context import PluginContext
from .errors import PluginError, PluginEventError, PluginLoadError
from .loader import PluginLoader
from .manifest import PLUGIN_DECLARATION_FILE, load_declarations

PRE_LOAD_EVENT = "plugin.pre_load"
POST_LOAD_EVENT = "plugin.post_load"


class PluginState(Enum):
    """Lifecycle states for plugins."""

    REGISTERED = "registered"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class PluginRecord:
    """Snapshot of a plugin known to the manager."""

    name: str
    version: str
    state: PluginState = PluginState.REGISTERED
    source: str = "instance"
    error: str | None = None


@dataclass(frozen=True)
class PluginTestResult:
    ok: bool
    error: BaseException | None = None


class PluginManager:
    """Keep the project's plugins and fan pipeline events out to them."""

    def __init__(
        self,
        events: EventBus,
        *,
        registry: CommandRegistry | None = None,
    ) -> None:
        self.events = events
        self.registry = registry or CommandRegistry()
        self._logger = logging.getLogger(__name__)
        self._plugins: dict[str, Any] = {}
        self._records: dict[str, PluginRecord] = {}

    def register_plugins(self, project_dir: Path | str) -> tuple[str, ...]:
        """Load every plugin declared in ``plugins.typh.toml``; no file means no plugins."""

        project_root = Path(project_dir).resolve()
        declaration_file = project_root / PLUGIN_DECLARATION_FILE
        if not declaration_file.is_file():
            self._logger.debug("no plugin declarations in %s", project_root)
            return ()

        names: list[str] = []
        for declaration in load_declarations(declaration_file):
            try:
                plugin = PluginLoader.from_declaration(declaration).load()
            except PluginLoadError as exc:
                self._records[declaration.name] = PluginRecord(
                    name=declaration.name,
                    version=declaration.version,
                    state=PluginState.FAILED,
                    source="declaration",
                    error=str(exc),
                )
                self._logger.error("plugin %s failed to load: %s", declaration.name, exc)
                raise
            names.append(
                self.register_plugin(plugin, project_root=project_root, source="declaration")
            )
        return tuple(names)

    def register_plugin(
        self,
        plugin: Any,
        *,
        project_root: Path | None = None,
        source: str = "instance",
    ) -> str:
        if not satisfies_plugin_interface(plugin):
            raise PluginLoadError(f"{plugin!r} does not implement the plugin interface")
        info = plugin.info
        if info.name in self._plugins:
            self._logger.warning("plugin %s registered twice; replacing", info.name)

        record = PluginRecord(name=info.name, version=info.version, source=source)
        self._records[info.name] = record
        self.events.emit(PRE_LOAD_EVENT, {"plugin": info.name, "source": source})

        self._bind(plugin, project_root)
        try:
            plugin.load()
        except Exception as exc:
            record.state = PluginState.FAILED
            record.error = str(exc)
            self._logger.exception("plugin %s failed in load()", info.name)
            raise PluginLoadError(f"plugin {info.name} failed to load: {exc}") from exc

        record.state = PluginState.LOADED
        self._plugins[info.name] = plugin
        self.events.emit(POST_LOAD_EVENT, {"plugin": info.name, "state": record.state.value})
        return info.name

    def get(self, name: str) -> Any | None:
        return self._plugins.get(name)

    def list_plugins(self) -> tuple[str, ...]:
        return tuple(self._plugins)

    def plugin_records(self) -> tuple[PluginRecord, ...]:
        return tuple(self._records.values())

    def process_event(self, name: str, payload: Any = None) -> bool:
        """Dispatch ``name`` to every loaded plugin; ``True`` means cancelled.

        Dispatch stops at the first plugin that answers ``EventResult.CANCEL``;
        no ordering across plugins is promised.
        """

        event = Event(name, payload)
        for plugin_name, plugin in self._plugins.items():
            try:
                result = plugin.on_event(event)
            except Exception as exc:
                raise PluginEventError(
                    f"plugin {plugin_name} failed handling '{name}': {exc}"
                ) from exc
            if result is EventResult.CANCEL:
                self._logger.info("plugin %s cancelled '%s'", plugin_name, name)
                return True
        return False

    def test(self, plugin: Any) -> PluginTestResult:
        """Load ``plugin`` and send it a ``test`` event, reporting instead of raising."""

        try:
            if not satisfies_plugin_interface(plugin):
                raise PluginLoadError(f"{plugin!r} does not implement the plugin interface")
            self._bind(plugin, None)
            plugin.load()
            plugin.on_event(Event(TEST_EVENT, TestEvent()))
        except Exception as exc:
            self._logger.debug("plugin test failed", exc_info=True)
            return PluginTestResult(ok=False, error=exc)
        return PluginTestResult(ok=True)

    def _bind(self, plugin: Any, project_root: Path | None) -> None:
        bind = getattr(plugin, "bind", None)
        if not callable(bind):
            return
        bind(
            PluginContext(
                info=plugin.info,
                project_root=project_root,
                registry=self.registry,
                events=self.events,
                logger=logging.getLogger(f"{__name__}.{plugin.info.name}"),
            )
        )


__all__ = [
    "PluginError",
    "PluginManager",
    "PluginRecord",
    "PluginState",
    "PluginTestResult",
]
