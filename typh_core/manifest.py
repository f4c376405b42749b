"""Build-info manifest embedded in every ``.typh`` archive."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping

from .errors import ConfigurationError

MANIFEST_ENTRY_NAME = "typhbuild.config.json"
ARCHIVE_SUFFIX = ".typh"
DEFAULT_PACKAGE_MANAGER = "npm"
MAIN_SUFFIXES = ("", ".js", ".mjs", ".cjs")


class PackageManagerKind(str, Enum):
    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"


SUPPORTED_PACKAGE_MANAGERS = tuple(kind.value for kind in PackageManagerKind)


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"manifest field '{key}' must be a non-empty string")
    return value


@dataclass
class PackageManifest:
    name: str
    version: str
    main: str
    pm: str = DEFAULT_PACKAGE_MANAGER
    deps: Dict[str, str] = field(default_factory=dict)

    def validate_package_manager(self) -> PackageManagerKind:
        try:
            return PackageManagerKind(self.pm)
        except ValueError:
            supported = ", ".join(SUPPORTED_PACKAGE_MANAGERS)
            raise ConfigurationError(
                f"Unsupported package manager: {self.pm!r} (expected one of {supported})"
            ) from None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "main": self.main,
            "pm": self.pm,
            "deps": dict(self.deps),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PackageManifest":
        if not isinstance(data, Mapping):
            raise ConfigurationError("manifest must be a JSON object")
        deps_raw = data.get("deps") or {}
        if not isinstance(deps_raw, Mapping):
            raise ConfigurationError("manifest field 'deps' must be an object")
        deps: Dict[str, str] = {}
        for key, value in deps_raw.items():
            if not isinstance(value, str):
                raise ConfigurationError(f"dependency {key!r} must map to a version string")
            deps[str(key)] = value
        pm = data.get("pm")
        return cls(
            name=_require_str(data, "name"),
            version=str(data.get("version") or ""),
            main=_require_str(data, "main"),
            # unknown or missing values are rejected by the runner, not here
            pm="" if pm is None else str(pm),
            deps=deps,
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def from_json(cls, text: str) -> "PackageManifest":
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"manifest is not valid JSON: {exc}") from exc
        return cls.from_dict(payload)
