"""Disk cache of named directories plus a small in-memory key/value layer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from typh_core.errors import ConfigurationError

CACHE_DIR_NAME = "cache"
CACHE_KEY_SUFFIX = "-cached"

logger = logging.getLogger(__name__)


def cache_key_for(name: str) -> str:
    """Return the cache directory key used for a package ``name``."""

    return f"{name}{CACHE_KEY_SUFFIX}"


class CacheStore:
    """Namespaced cache directories under ``<root>/cache``.

    Entries are created lazily and never evicted; removing them is left to
    the user.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self.cache_dir = self.root / CACHE_DIR_NAME
        self._memory: dict[Any, Any] = {}
        self.ensure_root()

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        return self.cache_dir

    def ensure_cache_directory(self, name: str) -> Path:
        path = self.find_cache_directory(name)
        path.mkdir(parents=True, exist_ok=True)
        logger.debug("cache directory ready: %s", path)
        return path

    def find_cache_directory(self, name: str) -> Path:
        return self.cache_dir / self._validate_name(name)

    def cache_directories(self) -> tuple[Path, ...]:
        if not self.cache_dir.exists():
            return ()
        return tuple(sorted(child for child in self.cache_dir.iterdir() if child.is_dir()))

    def retrieve_or_create_file(self, name: str, data: str | None = None) -> str:
        """Return cached contents for ``name``; seed it with ``data`` when absent or empty."""

        path = self.cache_dir / self._validate_name(name)
        if path.is_file():
            content = path.read_text(encoding="utf-8")
            if content:
                return content
        payload = data or ""
        path.write_text(payload, encoding="utf-8")
        return payload

    def put(self, key: Any, value: Any) -> "CacheStore":
        self._memory[key] = value
        return self

    def get(self, key: Any, default: Any | None = None) -> Any | None:
        return self._memory.get(key, default)

    @staticmethod
    def _validate_name(name: str) -> str:
        normalized = name.strip()
        if not normalized:
            raise ConfigurationError("cache entry name cannot be empty")
        if "/" in normalized or "\\" in normalized or normalized in (".", ".."):
            raise ConfigurationError(f"invalid cache entry name: {name!r}")
        return normalized
