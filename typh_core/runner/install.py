"""Map a package manager to the command that installs a package's dependencies."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Mapping, Sequence

from typh_core.manifest import PackageManagerKind

_RANGE_OPERATORS = ("^", "~")


def dependency_specs(dependencies: Mapping[str, str]) -> list[str]:
    """Render ``name@version`` installer arguments with range operators stripped."""

    specs: list[str] = []
    for name, version_range in dependencies.items():
        version = str(version_range).replace("^", "").strip()
        while version.startswith(_RANGE_OPERATORS):
            version = version[1:]
        specs.append(f"{name}@{version}" if version else name)
    return specs


def install_argv(
    pm: PackageManagerKind | str,
    vendor_dir: Path | str,
    specs: Sequence[str],
) -> list[str] | None:
    """Return the installer argv for ``pm`` or ``None`` when it is unsupported."""

    try:
        kind = PackageManagerKind(pm)
    except ValueError:
        return None
    target = str(vendor_dir)
    if kind is PackageManagerKind.YARN:
        return ["yarn", "install", "--modules-folder", str(Path(target) / "node_modules"), *specs]
    return [kind.value, "install", "--prefix", target, *specs]


def install_command(
    pm: PackageManagerKind | str,
    vendor_dir: Path | str,
    specs: Sequence[str],
) -> str | None:
    argv = install_argv(pm, vendor_dir, specs)
    if argv is None:
        return None
    return shlex.join(argv)
