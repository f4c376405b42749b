"""Project descriptor and the ``typh.toml`` configuration it reads from."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import tomllib

from .errors import ConfigurationError

PROJECT_CONFIG_FILE = "typh.toml"

logger = logging.getLogger(__name__)


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("false", "0", "no", "off"):
        return False
    if text in ("true", "1", "yes", "on"):
        return True
    return default


@dataclass
class ProjectConfig:
    """Read-only, dotted key-path view over a project's ``typh.toml``."""

    path: Path
    _data: dict[str, Any] = field(default_factory=dict, init=False)
    _exists: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.reload()

    def reload(self) -> None:
        if not self.path.is_file():
            self._data = {}
            self._exists = False
            return
        try:
            with self.path.open("rb") as handle:
                self._data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"unable to parse {self.path}: {exc}") from exc
        self._exists = True

    def exists(self) -> bool:
        return self._exists

    def get(self, key: str, default: Any | None = None) -> Any | None:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return default
            node = node[part]
        return node

    def get_str(self, key: str, default: str | None = None) -> str | None:
        value = self.get(key)
        if value is None:
            return default
        return str(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        return _as_bool(self.get(key), default)

    def get_mapping(self, key: str) -> dict[str, Any]:
        value = self.get(key)
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ConfigurationError(f"'{key}' in {self.path} must be a table")
        return dict(value)


class Project:
    """A project rooted at ``project_path`` with its configuration loaded."""

    def __init__(self, project_path: Path | str) -> None:
        self.project_path = Path(project_path).resolve()
        self.config = ProjectConfig(self.project_path / PROJECT_CONFIG_FILE)
        if not self.config.exists():
            logger.debug("no %s found in %s", PROJECT_CONFIG_FILE, self.project_path)

    @property
    def name(self) -> str | None:
        return self.config.get_str("buildinfo.name")

    @property
    def version(self) -> str | None:
        return self.config.get_str("buildinfo.version")

    @property
    def is_plugin(self) -> bool:
        return self.config.get_bool("buildinfo.plugin", False)

    def packager(self, options: "PackagerOptions | None" = None) -> "Packager":
        from .packager import Packager, PackagerOptions

        return Packager(self, options or PackagerOptions.from_config(self.config))
