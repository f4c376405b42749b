"""Core runtime pieces for the Typhon package/run pipeline."""

from .app import TyphonApp, TyphonAppStatus
from .cache import CacheStore, VendorStore
from .errors import ConfigurationError, TyphonError
from .events import Event, EventBus, EventResult
from .home import HomeLayout, HomeResolver
from .manifest import PackageManifest
from .paths import UserDirs
from .plugin import PluginManager, TyphonPlugin
from .project import Project, ProjectConfig

__all__ = [
    "CacheStore",
    "ConfigurationError",
    "Event",
    "EventBus",
    "EventResult",
    "HomeLayout",
    "HomeResolver",
    "PackageManifest",
    "PluginManager",
    "Project",
    "ProjectConfig",
    "TyphonApp",
    "TyphonAppStatus",
    "TyphonError",
    "TyphonPlugin",
    "UserDirs",
    "VendorStore",
]
