"""Cache subsystem: content-addressed image files with deduplicated downloads."""

from imgcache.cache.coordinator import DownloadCoordinator
from imgcache.cache.keys import derive_cache_key
from imgcache.cache.manager import CacheManager, is_cacheable
from imgcache.cache.paths import CachePaths, get_cache_group
from imgcache.cache.stats import CacheStats
from imgcache.cache.store import CacheStore

__all__ = [
    "CacheManager",
    "CachePaths",
    "CacheStats",
    "CacheStore",
    "DownloadCoordinator",
    "derive_cache_key",
    "get_cache_group",
    "is_cacheable",
]
