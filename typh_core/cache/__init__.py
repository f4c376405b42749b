"""Disk-backed cache and vendor stores."""

from .store import CACHE_KEY_SUFFIX, CacheStore, cache_key_for
from .vendor import VendorManifest, VendorStore

__all__ = [
    "CACHE_KEY_SUFFIX",
    "CacheStore",
    "VendorManifest",
    "VendorStore",
    "cache_key_for",
]
