"""
Persistent cache layer for fast reload of previously fetched datasets.
"""
from .cache_store import CacheEntry, CacheMetadata, CacheStore

__all__ = ["CacheEntry", "CacheMetadata", "CacheStore"]
