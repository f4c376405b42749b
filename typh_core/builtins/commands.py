"""Built-in commands registered before any plugin loads."""

from __future__ import annotations

from argparse import ArgumentParser, Namespace
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

from typh_core.api import TyphAbstractCommand, typhcommand
from typh_core.packager import PackagerOptions, describe_stats
from typh_core.project import Project

if TYPE_CHECKING:
    from typh_core.app import TyphonApp


def _project_dir(app: "TyphonApp", requested: str | None) -> Path:
    if requested:
        return Path(requested)
    return app.project_dir or Path.cwd()


@typhcommand(name="build", group="typh")
class BuildCommand(TyphAbstractCommand):
    """Package the project into a .typh archive.

    Collects src/main/javascript and src/main/resources and writes the
    archive under the dist directory (default: target/).
    """

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        parser.add_argument("--dir", "-d", dest="project_dir", default=None)
        parser.add_argument("--dist", default=None, help="Output directory for the archive")
        parser.add_argument("--name", default=None, help="Archive file name")
        parser.add_argument(
            "--include-tests",
            action="store_true",
            help="Keep files whose path contains /test/",
        )

    def run(self, argv: Namespace) -> int:
        project_dir = _project_dir(self.app, argv.project_dir)
        options = PackagerOptions.from_config(
            Project(project_dir).config,
            package_manager=self.app.default_package_manager,
        )
        overrides = {}
        if argv.dist:
            overrides["dist_directory"] = argv.dist
        if argv.name:
            overrides["packaging_name"] = argv.name
        if argv.include_tests:
            overrides["exclude_tests"] = False
        if overrides:
            options = replace(options, **overrides)

        result = self.app.build(project_dir, options)
        if result is None:
            print("[typh:build] cancelled by plugin")
            return 0
        print(f"[typh:build] archive={result.archive_path}")
        for label, value in describe_stats(result.stats).items():
            print(f"[typh:build] {label}: {value}")
        return 0


@typhcommand(name="run", group="typh")
class RunCommand(TyphAbstractCommand):
    """Load and run a .typh archive."""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        parser.add_argument("file")
        parser.add_argument(
            "--performance",
            action="store_true",
            help="Display the elapsed time once the program exits",
        )

    def run(self, argv: Namespace) -> int:
        result = self.app.run(argv.file, performance=argv.performance)
        if result is None:
            print("[typh:run] cancelled by plugin")
            return 0
        if argv.performance:
            print(f"[typh:run] time: {result.elapsed:.3f}s")
        return result.returncode


@typhcommand(name="test", group="plugin")
class PluginTestCommand(TyphAbstractCommand):
    """Load the current plugin project and send it a test event."""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        parser.add_argument("--dir", "-d", dest="project_dir", default=None)

    def run(self, argv: Namespace) -> int:
        project_dir = _project_dir(self.app, argv.project_dir)
        result = self.app.test_plugin(project_dir)
        name = Project(project_dir).name or Path(project_dir).resolve().name
        if not result.ok:
            print(f"[typh:plugin] {name} failed: {result.error}")
            return 1
        print(f"[typh:plugin] {name} is working")
        return 0


@typhcommand(name="list", group="plugin")
class PluginListCommand(TyphAbstractCommand):
    """List the plugins declared by the current project."""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        pass

    def run(self, argv: Namespace) -> int:
        records = self.app.plugin_manager.plugin_records()
        if not records:
            print("No plugins configured.")
            return 0
        for record in records:
            line = f"{record.name} {record.version} [{record.state.value}]"
            if record.error:
                line += f" error={record.error}"
            print(line)
        return 0


@typhcommand(name="cache", group="typh")
class CacheCommand(TyphAbstractCommand):
    """Show the cache and vendor locations and the cached packages."""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        pass

    def run(self, argv: Namespace) -> int:
        print(f"[typh:cache] cache: {self.app.cache.cache_dir}")
        print(f"[typh:cache] vendor: {self.app.vendor.vendor_dir}")
        entries = self.app.cache.cache_directories()
        if not entries:
            print("[typh:cache] no cached packages")
            return 0
        for entry in entries:
            print(f"  - {entry.name}")
        return 0
