"""Shared fixtures for the Typhon test-suite."""

from __future__ import annotations

import shutil
import textwrap
from pathlib import Path
from typing import Callable, Mapping, Sequence

import pytest

from typh_core.runner import ProcessResult

FIXTURE_ROOT = Path(__file__).parent / "fixtures" / "plugins"

DEMO_CONFIG = """
[buildinfo]
name = "demo"
version = "1.0.0"
packageManager = "npm"

[build]
main = "index.js"

[dependencies]
left-pad = "^1.3.0"
"""

DEMO_FILES = {
    "src/main/javascript/index.js": "console.log(require('left-pad')('x', 3));\n",
    "src/main/javascript/lib/util.js": "module.exports = {};\n",
    "src/main/resources/config.json": "{}\n",
}


class RecordingLauncher:
    """Stand-in for spawning processes; remembers every call it receives."""

    def __init__(
        self,
        returncodes: Mapping[str, int] | None = None,
        *,
        stderr: str = "",
        missing: Sequence[str] = (),
    ) -> None:
        self.returncodes = dict(returncodes or {})
        self.stderr = stderr
        self.missing = set(missing)
        self.calls: list[dict] = []

    async def __call__(self, argv, *, env=None, capture=False) -> ProcessResult:
        self.calls.append({"argv": list(argv), "env": env, "capture": capture})
        if argv[0] in self.missing:
            raise FileNotFoundError(2, "No such file or directory", argv[0])
        code = self.returncodes.get(argv[0], 0)
        return ProcessResult(returncode=code, stderr=self.stderr if code else "")

    def commands(self) -> list[str]:
        return [call["argv"][0] for call in self.calls]


@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()


@pytest.fixture
def make_launcher() -> Callable[..., RecordingLauncher]:
    return RecordingLauncher


@pytest.fixture
def home(tmp_path: Path) -> Path:
    return tmp_path / "home"


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Path]:
    """Write ``typh.toml`` plus source files into a fresh project directory."""

    def factory(
        config: str,
        files: Mapping[str, str] | None = None,
        *,
        name: str = "project",
    ) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        (root / "typh.toml").write_text(textwrap.dedent(config).strip() + "\n", encoding="utf-8")
        for relative, content in (files or {}).items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return factory


@pytest.fixture
def demo_project(make_project) -> Path:
    return make_project(DEMO_CONFIG, DEMO_FILES, name="demo")


@pytest.fixture
def sample_plugin_project(tmp_path: Path) -> Path:
    destination = tmp_path / "with_plugins"
    shutil.copytree(FIXTURE_ROOT / "sample_plugin", destination)
    return destination
