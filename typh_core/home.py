"""Locate the per-user Typhon home and resolve layered settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import tomllib

from .paths import UserDirs

SETTINGS_FILE_NAME = "typhon.toml"

_DEFAULTS: dict[str, str] = {
    "runtime": "node",
    "package_manager": "npm",
}
_ENV_KEY_MAP: dict[str, str] = {
    "home": "TYPHON_HOME",
    "runtime": "TYPHON_RUNTIME",
    "package_manager": "TYPHON_PACKAGE_MANAGER",
    "log_level": "TYPHON_LOG_LEVEL",
}


def _load_settings_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    return {key: value for key, value in data.items() if not isinstance(value, dict)}


@dataclass(frozen=True)
class HomeLayout:
    """Directory structure kept under the Typhon home."""

    root: Path
    cache_dir: Path
    vendor_dir: Path
    config_dir: Path
    settings_file: Path

    @classmethod
    def from_root(cls, root: Path) -> "HomeLayout":
        root = Path(root).expanduser().resolve()
        config_dir = root / "config"
        return cls(
            root=root,
            cache_dir=root / "cache",
            vendor_dir=root / "vendor",
            config_dir=config_dir,
            settings_file=config_dir / SETTINGS_FILE_NAME,
        )

    def ensure(self) -> "HomeLayout":
        for directory in (self.root, self.cache_dir, self.vendor_dir, self.config_dir):
            directory.mkdir(parents=True, exist_ok=True)
        return self


@dataclass
class HomeResolver:
    """Resolve the Typhon home and settings honoring CLI, env, file, defaults."""

    user_dirs: UserDirs | None = None
    cli_overrides: Mapping[str, str] | None = None
    env: Mapping[str, str] | None = None
    defaults: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        self.user_dirs = self.user_dirs or UserDirs()
        self.cli_overrides = dict(self.cli_overrides or {})
        self.env = os.environ if self.env is None else self.env
        merged = dict(_DEFAULTS)
        if self.defaults:
            merged.update(self.defaults)
        self.defaults = merged

    def home_root(self) -> Path:
        if override := self.cli_overrides.get("home"):
            return Path(override)
        if override := self._env_value("home"):
            return Path(override)
        return self.user_dirs.data_dir()

    def layout(self) -> HomeLayout:
        return HomeLayout.from_root(self.home_root())

    def resolve_setting(self, key: str) -> str | None:
        """Return ``key`` from CLI overrides, env, the settings file or defaults."""
        if value := self.cli_overrides.get(key):
            return value
        if value := self._env_value(key):
            return value
        file_layer = _load_settings_file(self.layout().settings_file)
        if (value := file_layer.get(key)) not in (None, ""):
            return str(value)
        return self.defaults.get(key)

    def _env_value(self, key: str) -> str | None:
        alias = _ENV_KEY_MAP.get(key, f"TYPHON_{key.upper()}")
        return self.env.get(alias) or None
