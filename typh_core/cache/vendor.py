"""Vendor directories that receive installed dependencies for run packages.

Each package name owns its own vendor directory and ``package.json`` record,
so runs of different packages never write the same manifest. Two runs of the
same package at the same time still race on that package's record.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from typh_core.errors import ConfigurationError

VENDOR_DIR_NAME = "vendor"
VENDOR_MANIFEST_NAME = "package.json"
VENDOR_VERSION = "dep"

logger = logging.getLogger(__name__)


class VendorManifest:
    """The ``package.json``-like record kept inside one vendor directory."""

    def __init__(self, directory: Path, name: str) -> None:
        self.directory = directory
        self.path = directory / VENDOR_MANIFEST_NAME
        self.name = name
        self._data: dict[str, Any] = self._empty()

    @property
    def modules_dir(self) -> Path:
        return self.directory / "node_modules"

    @property
    def dependencies(self) -> dict[str, str]:
        return dict(self._data["dependencies"])

    def ensure(self) -> dict[str, Any]:
        self.directory.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.write()
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"vendor manifest {self.path} is not valid JSON") from exc
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"vendor manifest {self.path} must be an object")
        deps = loaded.get("dependencies")
        loaded["dependencies"] = dict(deps) if isinstance(deps, dict) else {}
        self._data = loaded
        return self.to_dict()

    def add_dependency(self, name: str, version_range: str) -> "VendorManifest":
        self._data["dependencies"][name] = version_range
        return self

    def add_dependencies(self, dependencies: Mapping[str, str]) -> "VendorManifest":
        for name, version_range in dependencies.items():
            self.add_dependency(name, version_range)
        return self

    def write(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.to_dict(), indent=4), encoding="utf-8")

    def to_dict(self) -> dict[str, Any]:
        payload = dict(self._data)
        payload["dependencies"] = dict(self._data["dependencies"])
        return payload

    def _empty(self) -> dict[str, Any]:
        return {
            "name": f"@typhon/vendor-{self.name}",
            "version": VENDOR_VERSION,
            "dependencies": {},
        }


class VendorStore:
    """Hand out per-package vendor manifests under ``<root>/vendor``."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self.vendor_dir = self.root / VENDOR_DIR_NAME

    def ensure_vendor_exists(self) -> Path:
        self.vendor_dir.mkdir(parents=True, exist_ok=True)
        return self.vendor_dir

    def directory_for(self, name: str) -> Path:
        normalized = name.strip()
        if not normalized or "/" in normalized or "\\" in normalized or normalized in (".", ".."):
            raise ConfigurationError(f"invalid vendor name: {name!r}")
        return self.vendor_dir / normalized

    def for_project(self, name: str) -> VendorManifest:
        self.ensure_vendor_exists()
        manifest = VendorManifest(self.directory_for(name), name)
        manifest.ensure()
        logger.debug("vendor manifest ready: %s", manifest.path)
        return manifest
