"""Package a project's code and resource trees into a single ``.typh`` archive."""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from typh_core.errors import ConfigurationError
from typh_core.manifest import (
    ARCHIVE_SUFFIX,
    DEFAULT_PACKAGE_MANAGER,
    MAIN_SUFFIXES,
    MANIFEST_ENTRY_NAME,
    PackageManifest,
)

from .module_path import to_module_path

if TYPE_CHECKING:
    from typh_core.project import Project, ProjectConfig

CODE_ROOT = Path("src") / "main" / "javascript"
RESOURCE_ROOT = Path("src") / "main" / "resources"
DEFAULT_DIST_DIRECTORY = "target"
DEFAULT_VERSION = "0.0.1"
TEST_SEGMENT = "/test/"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackagerOptions:
    dist_directory: str = DEFAULT_DIST_DIRECTORY
    packaging_name: str | None = None
    exclude_tests: bool = True
    ignore: frozenset[str] = field(default_factory=frozenset)
    package_manager: str = DEFAULT_PACKAGE_MANAGER

    @classmethod
    def from_config(
        cls,
        config: "ProjectConfig",
        *,
        package_manager: str = DEFAULT_PACKAGE_MANAGER,
    ) -> "PackagerOptions":
        """Build options from the optional ``[package]`` table of ``typh.toml``.

        ``package_manager`` is written to manifests of projects that do not
        name one in ``buildinfo.packageManager``.
        """

        section = config.get_mapping("package")
        ignore = section.get("ignore") or ()
        if isinstance(ignore, str):
            ignore = (ignore,)
        return cls(
            dist_directory=str(section.get("dist") or DEFAULT_DIST_DIRECTORY),
            packaging_name=str(section["name"]) if section.get("name") else None,
            exclude_tests=config.get_bool("package.exclude_tests", True),
            ignore=frozenset(str(item) for item in ignore if str(item)),
            package_manager=package_manager,
        )


@dataclass
class PackagingStats:
    code_files: int = 0
    resource_files: int = 0
    skipped_files: int = 0
    total_size: int = 0
    archive_size: int = 0

    @property
    def total_files(self) -> int:
        return self.code_files + self.resource_files


@dataclass(frozen=True)
class PackagingResult:
    archive_path: Path
    manifest: PackageManifest
    stats: PackagingStats
    entries: tuple[str, ...]


class Packager:
    """Walk a project's source roots and write the archive plus its manifest."""

    def __init__(self, project: "Project", options: PackagerOptions | None = None) -> None:
        self.project = project
        self.options = options or PackagerOptions()
        self.packaging_name = self.options.packaging_name or (
            f"{project.config.get_str('buildinfo.name', 'out')}{ARCHIVE_SUFFIX}"
        )
        dist = Path(self.options.dist_directory)
        self.dist_dir = dist if dist.is_absolute() else project.project_path / dist
        self.stats = PackagingStats()

    @property
    def archive_path(self) -> Path:
        return self.dist_dir / self.packaging_name

    def package(self) -> PackagingResult:
        if self.project.is_plugin:
            logger.warning("refusing to package plugin project %s", self.project.project_path)
            raise ConfigurationError(
                "Cannot package a plugin project; publish it through its package manager instead."
            )

        self.stats = PackagingStats()
        manifest = self.build_manifest()

        root = self.project.project_path
        code_files = self._collect(root / CODE_ROOT)
        resource_files = self._collect(root / RESOURCE_ROOT)
        logger.info(
            "scanned sources: %d code file(s), %d resource file(s), %d skipped",
            len(code_files),
            len(resource_files),
            self.stats.skipped_files,
        )
        archived = {
            path.relative_to(root / CODE_ROOT).as_posix() for path in code_files
        } | {path.relative_to(root / RESOURCE_ROOT).as_posix() for path in resource_files}
        if not any(manifest.main + suffix in archived for suffix in MAIN_SUFFIXES):
            raise ConfigurationError(
                f"main file {manifest.main!r} is not part of the packaged sources"
            )

        self.dist_dir.mkdir(parents=True, exist_ok=True)
        entries: list[str] = []
        with zipfile.ZipFile(self.archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            seen: set[str] = {MANIFEST_ENTRY_NAME}
            self.stats.code_files = self._add_files(
                archive, code_files, root / CODE_ROOT, seen, entries
            )
            self.stats.resource_files = self._add_files(
                archive, resource_files, root / RESOURCE_ROOT, seen, entries
            )
            archive.writestr(MANIFEST_ENTRY_NAME, manifest.to_json())

        self.stats.archive_size = self.archive_path.stat().st_size
        logger.info(
            "wrote %s (%d file(s), %d bytes packed from %d bytes)",
            self.archive_path,
            self.stats.total_files,
            self.stats.archive_size,
            self.stats.total_size,
        )
        return PackagingResult(
            archive_path=self.archive_path,
            manifest=manifest,
            stats=self.stats,
            entries=tuple(entries),
        )

    def build_manifest(self) -> PackageManifest:
        config = self.project.config
        main = config.get_str("build.main")
        if not main:
            raise ConfigurationError("missing 'build.main' in project configuration")
        name = config.get_str("buildinfo.name")
        if not name:
            raise ConfigurationError("missing 'buildinfo.name' in project configuration")
        deps = config.get_mapping("dependencies")
        return PackageManifest(
            name=name,
            version=config.get_str("buildinfo.version", DEFAULT_VERSION) or DEFAULT_VERSION,
            main=to_module_path(main, posix=True),
            pm=config.get_str("buildinfo.packageManager") or self.options.package_manager,
            deps={str(key): str(value) for key, value in deps.items()},
        )

    def is_ignored(self, relative_path: str) -> bool:
        normalized = "/" + relative_path.replace("\\", "/").lstrip("/")
        for pattern in self.options.ignore:
            if pattern in normalized:
                return True
        return self.options.exclude_tests and TEST_SEGMENT in normalized

    def _collect(self, source_root: Path) -> list[Path]:
        if not source_root.is_dir():
            return []
        project_root = self.project.project_path
        kept: list[Path] = []
        ignored = 0
        for file_path in sorted(source_root.rglob("*")):
            if not file_path.is_file():
                continue
            if self.is_ignored(file_path.relative_to(project_root).as_posix()):
                ignored += 1
                continue
            kept.append(file_path)
        if ignored:
            logger.info("excluded %d file(s) from %s", ignored, source_root.name)
        self.stats.skipped_files += ignored
        return kept

    def _add_files(
        self,
        archive: zipfile.ZipFile,
        files: Iterable[Path],
        source_root: Path,
        seen: set[str],
        entries: list[str],
    ) -> int:
        added = 0
        for file_path in files:
            arcname = file_path.relative_to(source_root).as_posix()
            if arcname in seen:
                logger.warning("skipping %s: archive already holds %s", file_path, arcname)
                self.stats.skipped_files += 1
                continue
            seen.add(arcname)
            self.stats.total_size += file_path.stat().st_size
            archive.write(file_path, arcname)
            entries.append(arcname)
            added += 1
        return added


def describe_stats(stats: PackagingStats) -> Mapping[str, Any]:
    return {
        "code files": stats.code_files,
        "resource files": stats.resource_files,
        "total files": stats.total_files,
        "skipped files": stats.skipped_files,
        "package size": stats.archive_size,
    }
