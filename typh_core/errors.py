"""Error types shared by the Typhon core services."""


class TyphonError(Exception):
    """Base type for every failure raised by the package/run pipeline."""


class ConfigurationError(TyphonError):
    """Raised when a manifest or project configuration value is invalid or missing."""
