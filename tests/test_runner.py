"""End-to-end tests for unpacking, installing, and running archives."""

from __future__ import annotations

import asyncio
import json
import os
import threading
import zipfile

import pytest

from typh_core.cache import CacheStore, VendorStore
from typh_core.errors import ConfigurationError
from typh_core.manifest import MANIFEST_ENTRY_NAME, PackageManifest
from typh_core.project import Project
import typh_core.runner.runner as runner_module
from typh_core.runner import (
    ExecutionError,
    ExtractionError,
    InstallError,
    InvalidArchiveError,
    ProcessResult,
    Runner,
    read_manifest,
)


def _runner(home, launcher) -> Runner:
    return Runner(CacheStore(home), VendorStore(home), launcher=launcher)


def _write_archive(path, manifest: PackageManifest | None, files: dict[str, str]) -> None:
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
        if manifest is not None:
            archive.writestr(MANIFEST_ENTRY_NAME, manifest.to_json())


def test_run_extracts_installs_and_executes(demo_project, home, launcher) -> None:
    archive = Project(demo_project).packager().package().archive_path

    result = _runner(home, launcher).run_archive_sync(archive)

    cache_dir = home / "cache" / "demo-cached"
    vendor_dir = home / "vendor" / "demo"
    assert result.cache_dir == cache_dir
    assert result.vendor_dir == vendor_dir
    assert result.returncode == 0
    assert (cache_dir / "index.js").is_file()
    assert (cache_dir / "lib" / "util.js").is_file()
    assert (cache_dir / "config.json").is_file()

    install, execute = launcher.calls
    assert install["argv"] == ["npm", "install", "--prefix", str(vendor_dir), "left-pad@1.3.0"]
    assert install["capture"] is True
    assert execute["argv"] == ["node", str(result.main_file)]
    assert result.main_file == (cache_dir / "index.js").resolve()
    assert execute["env"]["NODE_PATH"].split(os.pathsep)[0] == str(vendor_dir / "node_modules")

    vendor_manifest = json.loads((vendor_dir / "package.json").read_text())
    assert vendor_manifest["dependencies"] == {"left-pad": "^1.3.0"}


def test_rerun_reuses_the_cache_directory(demo_project, home, launcher) -> None:
    archive = Project(demo_project).packager().package().archive_path
    runner = _runner(home, launcher)

    first = runner.run_archive_sync(archive)
    second = runner.run_archive_sync(archive)

    assert first.cache_dir == second.cache_dir
    assert [path.name for path in CacheStore(home).cache_directories()] == ["demo-cached"]


def test_existing_node_path_is_kept_after_vendor_modules(
    demo_project, home, launcher, monkeypatch
) -> None:
    monkeypatch.setenv("NODE_PATH", "/opt/modules")
    archive = Project(demo_project).packager().package().archive_path

    _runner(home, launcher).run_archive_sync(archive)

    node_path = launcher.calls[-1]["env"]["NODE_PATH"]
    assert node_path == os.pathsep.join([str(home / "vendor" / "demo" / "node_modules"), "/opt/modules"])


def test_main_without_extension_is_resolved(tmp_path, home, launcher) -> None:
    archive = tmp_path / "dotted.typh"
    manifest = PackageManifest(name="dotted", version="1", main="com/example/Main")
    _write_archive(archive, manifest, {"com/example/Main.js": "console.log(1)"})

    result = _runner(home, launcher).run_archive_sync(archive)

    assert result.main_file.name == "Main.js"
    assert launcher.calls[-1]["argv"][1] == str(result.main_file)


def test_wrong_extension_is_rejected_before_anything_happens(tmp_path, home, launcher) -> None:
    archive = tmp_path / "demo.zip"
    _write_archive(archive, PackageManifest(name="demo", version="1", main="index.js"), {})

    with pytest.raises(InvalidArchiveError, match=r"\.typh required"):
        _runner(home, launcher).run_archive_sync(archive)

    assert CacheStore(home).cache_directories() == ()
    assert launcher.calls == []


def test_directory_is_not_an_archive(tmp_path) -> None:
    folder = tmp_path / "folder.typh"
    folder.mkdir()

    with pytest.raises(InvalidArchiveError):
        read_manifest(folder)


def test_missing_manifest_entry_is_rejected(tmp_path, home, launcher) -> None:
    archive = tmp_path / "empty.typh"
    _write_archive(archive, None, {"index.js": ""})

    with pytest.raises(InvalidArchiveError, match=MANIFEST_ENTRY_NAME):
        _runner(home, launcher).run_archive_sync(archive)
    assert launcher.calls == []


def test_corrupt_archive_is_rejected(tmp_path) -> None:
    archive = tmp_path / "corrupt.typh"
    archive.write_bytes(b"not a zip file")

    with pytest.raises(InvalidArchiveError):
        read_manifest(archive)


def test_malformed_manifest_is_rejected(tmp_path) -> None:
    archive = tmp_path / "bad.typh"
    with zipfile.ZipFile(archive, "w") as handle:
        handle.writestr(MANIFEST_ENTRY_NAME, "{oops")

    with pytest.raises(InvalidArchiveError):
        read_manifest(archive)


def test_unsupported_package_manager_fails_without_running(tmp_path, home, launcher) -> None:
    archive = tmp_path / "bower.typh"
    manifest = PackageManifest(name="bower", version="1", main="index.js", pm="bower")
    _write_archive(archive, manifest, {"index.js": ""})

    with pytest.raises(ConfigurationError, match="Unsupported package manager"):
        _runner(home, launcher).run_archive_sync(archive)
    assert launcher.calls == []


def test_install_failure_carries_stderr(demo_project, home, make_launcher) -> None:
    launcher = make_launcher({"npm": 1}, stderr="E404 left-pad not found")
    archive = Project(demo_project).packager().package().archive_path

    with pytest.raises(InstallError) as excinfo:
        _runner(home, launcher).run_archive_sync(archive)

    assert excinfo.value.returncode == 1
    assert "E404" in excinfo.value.stderr
    assert excinfo.value.command[:2] == ("npm", "install")
    assert launcher.commands() == ["npm"]


def test_missing_package_manager_binary(demo_project, home, make_launcher) -> None:
    launcher = make_launcher(missing=["npm"])
    archive = Project(demo_project).packager().package().archive_path

    with pytest.raises(InstallError, match="npm not found"):
        _runner(home, launcher).run_archive_sync(archive)


def test_nonzero_exit_of_the_program(demo_project, home, make_launcher) -> None:
    launcher = make_launcher({"node": 3})
    archive = Project(demo_project).packager().package().archive_path

    with pytest.raises(ExecutionError) as excinfo:
        _runner(home, launcher).run_archive_sync(archive)

    assert excinfo.value.returncode == 3
    assert excinfo.value.command[0] == "node"


def test_missing_main_file_fails_before_execution(tmp_path, home, launcher) -> None:
    archive = tmp_path / "nomain.typh"
    _write_archive(archive, PackageManifest(name="nomain", version="1", main="missing.js"), {})

    with pytest.raises(ConfigurationError, match="missing.js"):
        _runner(home, launcher).run_archive_sync(archive)
    assert launcher.commands() == ["npm"]


def test_main_cannot_escape_the_cache_directory(tmp_path, home, launcher) -> None:
    archive = tmp_path / "escape.typh"
    _write_archive(archive, PackageManifest(name="escape", version="1", main="../../x.js"), {})

    with pytest.raises(ConfigurationError, match="outside"):
        _runner(home, launcher).run_archive_sync(archive)


def test_runtime_is_configurable(demo_project, home, launcher) -> None:
    archive = Project(demo_project).packager().package().archive_path
    runner = Runner(CacheStore(home), VendorStore(home), runtime="bun", launcher=launcher)

    asyncio.run(runner.run_archive(archive))

    assert launcher.calls[-1]["argv"][0] == "bun"


def test_corrupt_payload_entry_fails_extraction(tmp_path, home, launcher) -> None:
    archive = tmp_path / "damaged.typh"
    manifest = PackageManifest(name="damaged", version="1", main="index.js")
    _write_archive(archive, manifest, {"index.js": "console.log('payload-marker')"})
    raw = archive.read_bytes()
    archive.write_bytes(raw.replace(b"payload-marker", b"PAYLOAD-MARKER"))

    with pytest.raises(ExtractionError, match="^Extraction failed:") as excinfo:
        _runner(home, launcher).run_archive_sync(archive)

    assert excinfo.value.__cause__ is not None
    assert "node" not in launcher.commands()


def test_blocked_cache_directory_fails_extraction(demo_project, home, launcher) -> None:
    archive = Project(demo_project).packager().package().archive_path
    blocked = home / "cache" / "demo-cached"
    blocked.mkdir(parents=True)
    (blocked / "lib").write_text("a file where a directory belongs")

    with pytest.raises(ExtractionError) as excinfo:
        _runner(home, launcher).run_archive_sync(archive)

    assert isinstance(excinfo.value.__cause__, OSError)
    assert launcher.commands() == ["npm"]


class _HandshakeLauncher:
    """Installs only finish once extraction has started, and the reverse."""

    def __init__(self, extract_started: threading.Event, install_started: threading.Event) -> None:
        self.extract_started = extract_started
        self.install_started = install_started
        self.saw_extraction: bool | None = None

    async def __call__(self, argv, *, env=None, capture=False) -> ProcessResult:
        if argv[0] == "npm":
            self.install_started.set()
            self.saw_extraction = await asyncio.to_thread(self.extract_started.wait, 5)
        return ProcessResult(returncode=0)


def test_extraction_and_install_overlap(demo_project, home, monkeypatch) -> None:
    archive = Project(demo_project).packager().package().archive_path
    extract_started = threading.Event()
    install_started = threading.Event()
    saw_install: list[bool] = []
    extract_all = runner_module._extract_all

    def extract_when_install_is_running(archive_path, target) -> None:
        extract_started.set()
        saw_install.append(install_started.wait(5))
        extract_all(archive_path, target)

    monkeypatch.setattr(runner_module, "_extract_all", extract_when_install_is_running)
    launcher = _HandshakeLauncher(extract_started, install_started)

    result = _runner(home, launcher).run_archive_sync(archive)

    assert result.returncode == 0
    assert saw_install == [True]
    assert launcher.saw_extraction is True
