"""Custom exception hierarchy for imgcache."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ImageCacheError(Exception):
    """Base exception for all imgcache errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class InvalidUrlError(ImageCacheError):
    """URL is not cacheable or cannot be parsed.

    Examples: non-http(s) scheme, missing host without a cache group.
    """

    def __init__(self, message: str = "", url: object = None) -> None:
        super().__init__(message)
        self.url = url


class CacheMissError(ImageCacheError):
    """Requested file is absent from the cache or invalid (zero-size, not a file)."""

    def __init__(self, message: str = "", path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class TransportError(ImageCacheError):
    """Download failed. Wraps the underlying transport failure.

    Examples: non-2xx response, connection reset, timeout.
    """

    def __init__(
        self,
        message: str = "",
        url: str | None = None,
        http_status: int | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.http_status = http_status
        self.original = original


class FilesystemError(ImageCacheError):
    """Filesystem operation failed on a path the cache requires."""

    def __init__(
        self,
        message: str = "",
        path: Path | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.original = original


class NotFoundError(FilesystemError):
    """Path does not exist."""


class ConfigError(ImageCacheError):
    """A configuration value has the wrong type or is out of range."""

    def __init__(self, message: str = "", key: str | None = None, value: object = None) -> None:
        super().__init__(message)
        self.key = key
        self.value = value
