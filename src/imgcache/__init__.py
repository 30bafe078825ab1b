"""Content-addressed disk cache for remote images."""

from imgcache.cache.manager import CacheManager, is_cacheable
from imgcache.errors.exceptions import (
    CacheMissError,
    ConfigError,
    FilesystemError,
    ImageCacheError,
    InvalidUrlError,
    TransportError,
)
from imgcache.types import CacheOptions, PrefetchReport

__all__ = [
    "CacheManager",
    "CacheOptions",
    "PrefetchReport",
    "is_cacheable",
    "ImageCacheError",
    "InvalidUrlError",
    "CacheMissError",
    "ConfigError",
    "TransportError",
    "FilesystemError",
]
