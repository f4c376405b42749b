"""Resolve plugin entrypoints into plugin objects."""

from __future__ import annotations

import importlib
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from .base import PluginInfo, TyphonPlugin, satisfies_plugin_interface
from .errors import PluginLoadError
from .manifest import PluginDeclaration


class PluginLoader:
    """Import one entrypoint and turn it into a plugin instance.

    The entrypoint may name a class (constructed with the declared
    ``PluginInfo``) or a module-level, already constructed plugin object.
    """

    def __init__(self, entrypoint: str, import_root: Path, info: PluginInfo) -> None:
        self.entrypoint = entrypoint
        self.import_root = import_root
        self.info = info
        self._module_path, self._attribute = self._split_entrypoint(entrypoint)

    @classmethod
    def from_declaration(cls, declaration: PluginDeclaration) -> "PluginLoader":
        return cls(
            declaration.entrypoint,
            declaration.path,
            PluginInfo(name=declaration.name, version=declaration.version),
        )

    def load(self) -> TyphonPlugin:
        with self._insert_sys_path():
            target = self._import_target()
        if isinstance(target, type):
            try:
                plugin = target(self.info)
            except Exception as exc:
                raise PluginLoadError(
                    f"plugin {self.info.name} could not be constructed: {exc}"
                ) from exc
        else:
            plugin = target
        if not satisfies_plugin_interface(plugin):
            raise PluginLoadError(
                f"{self.entrypoint} does not provide load(), on_event() and info"
            )
        return plugin

    def _split_entrypoint(self, entrypoint: str) -> tuple[str, str]:
        if ":" in entrypoint:
            module_path, attribute = entrypoint.split(":", 1)
        elif "." in entrypoint:
            module_path, attribute = entrypoint.rsplit(".", 1)
        else:
            raise PluginLoadError(
                f"entrypoint for plugin {self.info.name} is not a module path"
            )
        if not module_path or not attribute:
            raise PluginLoadError(f"entrypoint for plugin {self.info.name} is incomplete")
        return module_path, attribute

    @contextmanager
    def _insert_sys_path(self) -> Iterator[Path]:
        path = str(self.import_root)
        already_present = path in sys.path
        if not already_present:
            sys.path.insert(0, path)
        try:
            yield self.import_root
        finally:
            if not already_present and path in sys.path:
                sys.path.remove(path)

    def _import_target(self) -> Any:
        try:
            module = importlib.import_module(self._module_path)
        except ImportError as exc:
            raise PluginLoadError(
                f"unable to import module {self._module_path} for plugin {self.info.name}"
            ) from exc
        except Exception as exc:
            raise PluginLoadError(
                f"module {self._module_path} failed while importing: {exc}"
            ) from exc
        try:
            return getattr(module, self._attribute)
        except AttributeError as exc:
            raise PluginLoadError(
                f"module {self._module_path} does not expose {self._attribute}"
            ) from exc
