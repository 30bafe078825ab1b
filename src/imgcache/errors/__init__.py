"""Error handling: the exception hierarchy raised by the cache."""

from imgcache.errors.exceptions import (
    CacheMissError,
    ConfigError,
    FilesystemError,
    ImageCacheError,
    InvalidUrlError,
    NotFoundError,
    TransportError,
)

__all__ = [
    "ImageCacheError",
    "InvalidUrlError",
    "CacheMissError",
    "ConfigError",
    "TransportError",
    "FilesystemError",
    "NotFoundError",
]
