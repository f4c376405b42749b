"""Parse the project-local plugin declaration file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import tomllib

from .errors import PluginManifestError

PLUGIN_DECLARATION_FILE = "plugins.typh.toml"


@dataclass(frozen=True)
class PluginDeclaration:
    """One ``[[plugins]]`` entry of ``plugins.typh.toml``."""

    name: str
    version: str
    entrypoint: str
    path: Path

    @staticmethod
    def _normalize_field(label: str, value: object, index: int) -> str:
        if value is None:
            raise PluginManifestError(f"plugins[{index}] is missing '{label}'")
        if not isinstance(value, str):
            raise PluginManifestError(f"plugins[{index}].{label} must be a string")
        normalized = value.strip()
        if not normalized:
            raise PluginManifestError(f"plugins[{index}].{label} cannot be empty")
        return normalized


def load_declarations(path: Path) -> tuple[PluginDeclaration, ...]:
    """Load and validate plugin declarations; import roots resolve against ``path``'s folder."""

    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise PluginManifestError(f"unable to read plugin declarations at {path}") from exc

    entries = document.get("plugins", [])
    if not isinstance(entries, list):
        raise PluginManifestError("'plugins' must be an array of tables")

    base = path.parent.resolve()
    declarations: list[PluginDeclaration] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise PluginManifestError(f"plugins[{index}] must be a table")
        normalize = PluginDeclaration._normalize_field
        root = entry.get("path")
        if root is not None and not isinstance(root, str):
            raise PluginManifestError(f"plugins[{index}].path must be a string")
        declarations.append(
            PluginDeclaration(
                name=normalize("name", entry.get("name"), index),
                version=normalize("version", entry.get("version", "0.0.0"), index),
                entrypoint=normalize("entrypoint", entry.get("entrypoint"), index),
                path=(base / root).resolve() if root else base,
            )
        )
    return tuple(declarations)
