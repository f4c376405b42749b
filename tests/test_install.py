"""Tests for package-manager install command mapping."""

from __future__ import annotations

from pathlib import Path

import pytest

from typh_core.runner import dependency_specs, install_argv, install_command


def test_dependency_specs_strip_range_operators() -> None:
    specs = dependency_specs({"left-pad": "^1.3.0", "chalk": "~5.0.0", "lodash": "4.17.21"})

    assert specs == ["left-pad@1.3.0", "chalk@5.0.0", "lodash@4.17.21"]


def test_dependency_specs_remove_every_caret() -> None:
    assert dependency_specs({"odd": "1.x || ^2.0.0"}) == ["odd@1.x || 2.0.0"]


@pytest.mark.parametrize("pm", ["npm", "pnpm"])
def test_prefix_style_installers(pm) -> None:
    vendor = Path("/home/typh/vendor/demo")

    argv = install_argv(pm, vendor, ["left-pad@1.3.0"])

    assert argv == [pm, "install", "--prefix", str(vendor), "left-pad@1.3.0"]


def test_yarn_installs_into_modules_folder() -> None:
    vendor = Path("/home/typh/vendor/demo")

    argv = install_argv("yarn", vendor, ["left-pad@1.3.0"])

    assert argv == [
        "yarn",
        "install",
        "--modules-folder",
        str(vendor / "node_modules"),
        "left-pad@1.3.0",
    ]


def test_unsupported_package_manager_has_no_command() -> None:
    assert install_argv("bower", "/tmp/vendor", []) is None
    assert install_command("bower", "/tmp/vendor", []) is None


def test_install_command_is_shell_quoted() -> None:
    command = install_command("npm", "/tmp/my vendor", ["left-pad@1.3.0"])

    assert command == "npm install --prefix '/tmp/my vendor' left-pad@1.3.0"
