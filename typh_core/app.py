"""Application object that wires the Typhon pipeline services together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

from typh_core.builtins import register_builtin_commands
from typh_core.cache import CacheStore, VendorStore
from typh_core.errors import ConfigurationError
from typh_core.events import BUILD_EVENT, RUN_EVENT, BuildEvent, EventBus, RunEvent
from typh_core.home import HomeLayout, HomeResolver
from typh_core.manifest import DEFAULT_PACKAGE_MANAGER
from typh_core.packager import PackagerOptions, PackagingResult
from typh_core.paths import UserDirs
from typh_core.plugin import (
    PluginInfo,
    PluginLoader,
    PluginLoadError,
    PluginManager,
    PluginTestResult,
)
from typh_core.project import Project
from typh_core.registry import CommandRegistry
from typh_core.runner import ProcessLauncher, Runner, RunResult


@dataclass(frozen=True)
class TyphonAppStatus:
    home: HomeLayout
    project_dir: Path | None
    plugins: Sequence[str]
    commands: Sequence[str]


class TyphonApp:
    """Entry point that glues the home layout, stores, runner, and plugins."""

    def __init__(
        self,
        *,
        home: Path | str | None = None,
        user_dirs: UserDirs | None = None,
        logger: logging.Logger | None = None,
        launcher: ProcessLauncher | None = None,
        settings: Mapping[str, str] | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger("typh_core.app")
        self.user_dirs = user_dirs or UserDirs()

        overrides = dict(settings or {})
        if home is not None:
            overrides["home"] = str(home)
        self.home_resolver = HomeResolver(user_dirs=self.user_dirs, cli_overrides=overrides)
        self.layout = self.home_resolver.layout().ensure()

        self.cache = CacheStore(self.layout.root)
        self.vendor = VendorStore(self.layout.root)
        self.events = EventBus()
        self.commands = CommandRegistry()
        self.plugin_manager = PluginManager(self.events, registry=self.commands)
        self.runner = Runner(
            self.cache,
            self.vendor,
            runtime=self.home_resolver.resolve_setting("runtime") or "node",
            launcher=launcher,
        )
        self.default_package_manager = (
            self.home_resolver.resolve_setting("package_manager") or DEFAULT_PACKAGE_MANAGER
        )
        self.project_dir: Path | None = None
        self._builtins_registered = False

    def _register_builtins(self) -> None:
        if self._builtins_registered:
            return
        register_builtin_commands(self.commands)
        self._builtins_registered = True

    def bootstrap(self, project_dir: Path | str | None = None) -> TyphonAppStatus:
        """Register built-in commands and, when given, the project's declared plugins."""

        self._register_builtins()
        if project_dir is not None:
            self.project_dir = Path(project_dir).resolve()
            loaded = self.plugin_manager.register_plugins(self.project_dir)
            if loaded:
                self.logger.info("loaded plugins: %s", ", ".join(loaded))
        return TyphonAppStatus(
            home=self.layout,
            project_dir=self.project_dir,
            plugins=self.plugin_manager.list_plugins(),
            commands=self.commands.labels(),
        )

    def publish(self, name: str, payload: Any = None) -> bool:
        """Send an event to the plugins, then to host subscribers; ``True`` if cancelled."""

        if self.plugin_manager.process_event(name, payload):
            return True
        return self.events.emit(name, payload)

    def build(
        self,
        project_dir: Path | str,
        options: PackagerOptions | None = None,
    ) -> PackagingResult | None:
        project = Project(project_dir)
        options = options or PackagerOptions.from_config(
            project.config, package_manager=self.default_package_manager
        )
        if self.publish(BUILD_EVENT, BuildEvent(project=project, options=options)):
            self.logger.info("build of %s cancelled by a plugin", project.project_path)
            return None
        return project.packager(options).package()

    def run(self, file: Path | str, performance: bool = False) -> RunResult | None:
        path = Path(file)
        if self.publish(RUN_EVENT, RunEvent(file=path, performance=performance)):
            self.logger.info("run of %s cancelled by a plugin", path)
            return None
        return self.runner.run_archive_sync(path)

    def test_plugin(self, project_dir: Path | str) -> PluginTestResult:
        """Load a plugin project's own ``build.main`` as a plugin and exercise it."""

        project = Project(project_dir)
        if not project.config.exists():
            raise ConfigurationError(
                f"Cannot find a project in {project.project_path}; a plugin project needs typh.toml."
            )
        if not project.is_plugin:
            raise ConfigurationError("Cannot test a project that is not a plugin project.")
        main = project.config.get_str("build.main")
        if not main:
            raise ConfigurationError("Cannot find the plugin entrypoint, set `build.main`.")

        info = PluginInfo(
            name=project.name or project.project_path.name,
            version=project.version or "0.0.0",
        )
        try:
            plugin = PluginLoader(main, project.project_path, info).load()
        except PluginLoadError as exc:
            self.logger.debug("plugin %s could not be loaded", info.name, exc_info=True)
            return PluginTestResult(ok=False, error=exc)
        return self.plugin_manager.test(plugin)

