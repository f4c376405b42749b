"""Plugin-specific error types."""

from typh_core.errors import TyphonError


class PluginError(TyphonError):
    """Base type for plugin-related failures."""


class PluginManifestError(PluginError):
    """Raised when the plugin declaration file cannot be loaded or validated."""


class PluginLoadError(PluginError):
    """Raised when a plugin cannot be imported, constructed, or loaded."""


class PluginEventError(PluginError):
    """Raised when a plugin's event handler fails during dispatch."""
