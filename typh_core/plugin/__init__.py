"""Plugin support for the package/run pipeline."""

from .base import PluginInfo, TyphonPlugin
from .context import PluginContext
from .errors import (
    PluginError,
    PluginEventError,
    PluginLoadError,
    PluginManifestError,
)
from .loader import PluginLoader
from .manager import PluginManager, PluginRecord, PluginState, PluginTestResult
from .manifest import PLUGIN_DECLARATION_FILE, PluginDeclaration, load_declarations

__all__ = [
    "PLUGIN_DECLARATION_FILE",
    "PluginContext",
    "PluginDeclaration",
    "PluginError",
    "PluginEventError",
    "PluginInfo",
    "PluginLoadError",
    "PluginLoader",
    "PluginManager",
    "PluginManifestError",
    "PluginRecord",
    "PluginState",
    "PluginTestResult",
    "TyphonPlugin",
    "load_declarations",
]
