"""Unpack a ``.typh`` archive into the cache, install its dependencies, and run it."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import time
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Mapping, Protocol, Sequence

from typh_core.cache import CacheStore, VendorManifest, VendorStore, cache_key_for
from typh_core.errors import ConfigurationError
from typh_core.manifest import (
    ARCHIVE_SUFFIX,
    MAIN_SUFFIXES,
    MANIFEST_ENTRY_NAME,
    PackageManifest,
)

from .errors import ExecutionError, ExtractionError, InstallError, InvalidArchiveError
from .install import dependency_specs, install_argv

MODULE_PATH_ENV = "NODE_PATH"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""


class ProcessLauncher(Protocol):
    def __call__(
        self,
        argv: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
        capture: bool = False,
    ) -> Awaitable[ProcessResult]:
        ...


async def spawn_process(
    argv: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
    capture: bool = False,
) -> ProcessResult:
    """Run ``argv`` as a child process and wait for it; stdio is inherited unless captured."""

    executable = shutil.which(argv[0]) or argv[0]
    stream = asyncio.subprocess.PIPE if capture else None
    process = await asyncio.create_subprocess_exec(
        executable,
        *argv[1:],
        env=dict(env) if env is not None else None,
        stdout=stream,
        stderr=stream,
    )
    stdout, stderr = await process.communicate()
    return ProcessResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=(stdout or b"").decode("utf-8", errors="replace"),
        stderr=(stderr or b"").decode("utf-8", errors="replace"),
    )


@dataclass(frozen=True)
class RunResult:
    manifest: PackageManifest
    cache_dir: Path
    vendor_dir: Path
    main_file: Path
    returncode: int
    elapsed: float


def read_manifest(archive_path: Path | str) -> PackageManifest:
    """Validate the archive suffix and return the manifest stored inside it."""

    path = Path(archive_path)
    if path.suffix != ARCHIVE_SUFFIX:
        raise InvalidArchiveError(
            f"Unknown file extension for {path.name}: {ARCHIVE_SUFFIX} required."
        )
    if path.is_dir():
        raise InvalidArchiveError(f"{path} is a directory, not a {ARCHIVE_SUFFIX} archive.")
    try:
        with zipfile.ZipFile(path) as archive:
            try:
                raw = archive.read(MANIFEST_ENTRY_NAME)
            except KeyError:
                raise InvalidArchiveError(
                    f"No build entry ({MANIFEST_ENTRY_NAME}) found in {path.name}."
                ) from None
    except zipfile.BadZipFile as exc:
        raise InvalidArchiveError(f"{path} is not a valid {ARCHIVE_SUFFIX} archive: {exc}") from exc
    try:
        return PackageManifest.from_json(raw.decode("utf-8"))
    except (UnicodeDecodeError, ConfigurationError) as exc:
        raise InvalidArchiveError(f"Malformed build entry in {path.name}: {exc}") from exc


class Runner:
    """Turn an archive back into a running process."""

    def __init__(
        self,
        cache: CacheStore,
        vendor: VendorStore,
        *,
        runtime: str = "node",
        launcher: ProcessLauncher | None = None,
    ) -> None:
        self.cache = cache
        self.vendor = vendor
        self.runtime = runtime
        self.launcher: ProcessLauncher = launcher or spawn_process

    async def run_archive(self, archive_path: Path | str) -> RunResult:
        started = time.perf_counter()
        path = Path(archive_path)
        manifest = read_manifest(path)
        cache_dir = self.cache.ensure_cache_directory(cache_key_for(manifest.name))
        logger.info("running %s@%s from %s", manifest.name, manifest.version, cache_dir)

        outcomes = await asyncio.gather(
            self.extract(path, cache_dir),
            self.install_dependencies(manifest),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        vendor: VendorManifest = outcomes[1]

        main_file, result = await self.run_main(manifest, cache_dir, vendor)
        return RunResult(
            manifest=manifest,
            cache_dir=cache_dir,
            vendor_dir=vendor.directory,
            main_file=main_file,
            returncode=result.returncode,
            elapsed=time.perf_counter() - started,
        )

    def run_archive_sync(self, archive_path: Path | str) -> RunResult:
        return asyncio.run(self.run_archive(archive_path))

    async def extract(self, archive_path: Path, target: Path) -> None:
        try:
            await asyncio.to_thread(_extract_all, archive_path, target)
        except (zipfile.BadZipFile, zlib.error, OSError, RuntimeError) as exc:
            raise ExtractionError(f"Extraction failed: {exc}") from exc
        logger.debug("extracted %s into %s", archive_path, target)

    async def install_dependencies(self, manifest: PackageManifest) -> VendorManifest:
        kind = manifest.validate_package_manager()
        vendor = self.vendor.for_project(manifest.name)
        vendor.add_dependencies(manifest.deps).write()

        argv = install_argv(kind, vendor.directory, dependency_specs(manifest.deps))
        if argv is None:
            raise ConfigurationError(f"Unsupported package manager: {manifest.pm}")
        logger.info("installing dependencies: %s", " ".join(argv))
        try:
            result = await self.launcher(argv, capture=True)
        except FileNotFoundError as exc:
            raise InstallError(
                f"{argv[0]} not found. Install it and ensure it is available in PATH.",
                command=argv,
            ) from exc
        except OSError as exc:
            raise InstallError(f"Execution error: {exc}", command=argv) from exc
        if result.returncode != 0:
            raise InstallError(
                f"Dependency installation failed (exit={result.returncode}): {' '.join(argv)}",
                command=argv,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return vendor

    async def run_main(
        self,
        manifest: PackageManifest,
        cache_dir: Path,
        vendor: VendorManifest,
    ) -> tuple[Path, ProcessResult]:
        main_file = self.resolve_main(manifest, cache_dir)
        argv = [self.runtime, str(main_file)]
        env = dict(os.environ)
        module_paths = [str(vendor.modules_dir)]
        if existing := env.get(MODULE_PATH_ENV):
            module_paths.append(existing)
        env[MODULE_PATH_ENV] = os.pathsep.join(module_paths)

        logger.info("executing %s", " ".join(argv))
        result = await self.launcher(argv, env=env, capture=False)
        if result.returncode != 0:
            raise ExecutionError(argv, result.returncode)
        return main_file, result

    @staticmethod
    def resolve_main(manifest: PackageManifest, cache_dir: Path) -> Path:
        root = cache_dir.resolve()
        base = (root / manifest.main).resolve()
        if not base.is_relative_to(root):
            raise ConfigurationError(f"main file {manifest.main!r} points outside the package")
        for suffix in MAIN_SUFFIXES:
            candidate = base.with_name(base.name + suffix) if suffix else base
            if candidate.is_file():
                return candidate
        raise ConfigurationError(f"main file {manifest.main!r} not found in {manifest.name} package")


def _extract_all(archive_path: Path, target: Path) -> None:
    target.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive_path) as archive:
        archive.extractall(target)
