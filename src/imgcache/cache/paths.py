"""Storage path resolution: base dir / cache group / cache key."""

from __future__ import annotations

from pathlib import Path

from imgcache.cache.keys import derive_cache_key, url_host
from imgcache.config.defaults import DEFAULT_CACHE_ROOT, DEFAULT_SUB_DIR
from imgcache.errors.exceptions import InvalidUrlError
from imgcache.types import DEFAULT_OPTIONS, CacheOptions


class CachePaths:
    """Maps URLs to absolute storage paths under a fixed base directory."""

    def __init__(
        self,
        cache_root: str | Path = DEFAULT_CACHE_ROOT,
        sub_dir: str = DEFAULT_SUB_DIR,
    ) -> None:
        self._base_dir = Path(cache_root).expanduser() / sub_dir

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def resolve_path(self, url: str, options: CacheOptions = DEFAULT_OPTIONS) -> Path:
        """Return the storage path of url under the given options."""
        cache_key = derive_cache_key(url, options)
        return self._base_dir / get_cache_group(url, options) / cache_key


def get_cache_group(url: str, options: CacheOptions = DEFAULT_OPTIONS) -> str:
    """Directory segment for a URL: the configured group, else the URL host."""
    if options.cache_group:
        return options.cache_group
    host = url_host(url)
    if not host or host in {".", ".."}:
        raise InvalidUrlError(f"URL has no host and no cache group: {url!r}", url=url)
    return host
