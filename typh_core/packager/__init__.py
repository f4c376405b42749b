"""Archive builder for Typhon projects."""

from .module_path import to_module_path
from .packager import (
    CODE_ROOT,
    RESOURCE_ROOT,
    Packager,
    PackagerOptions,
    PackagingResult,
    PackagingStats,
    describe_stats,
)

__all__ = [
    "CODE_ROOT",
    "RESOURCE_ROOT",
    "Packager",
    "PackagerOptions",
    "PackagingResult",
    "PackagingStats",
    "describe_stats",
    "to_module_path",
]
