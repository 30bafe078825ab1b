"""Cache manager: public facade over key derivation, storage and downloads."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from imgcache.cache.coordinator import DownloadCoordinator
from imgcache.cache.paths import CachePaths
from imgcache.cache.stats import CacheStats
from imgcache.cache.store import CacheStore
from imgcache.concurrency.prefetch import PrefetchScheduler
from imgcache.config.defaults import (
    DEFAULT_CACHE_ROOT,
    DEFAULT_PREFETCH_WORKERS,
    DEFAULT_SUB_DIR,
    DEFAULT_TIMEOUT_SECONDS,
)
from imgcache.errors.exceptions import (
    CacheMissError,
    ConfigError,
    FilesystemError,
    InvalidUrlError,
)
from imgcache.io.filesystem import FileSystem
from imgcache.io.transport import HttpxTransport, Transport
from imgcache.types import DEFAULT_OPTIONS, CacheOptions, HeadersResolver, PrefetchReport

logger = logging.getLogger(__name__)


def is_cacheable(url: object) -> bool:
    """True iff url is a string starting with http:// or https://."""
    return isinstance(url, str) and url.startswith(("http://", "https://"))


class CacheManager:
    """Disk cache for remote images, keyed by URL and cache options."""

    def __init__(
        self,
        cache_root: str | Path = DEFAULT_CACHE_ROOT,
        sub_dir: str = DEFAULT_SUB_DIR,
        fs: FileSystem | None = None,
        transport: Transport | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        prefetch_workers: int | None = DEFAULT_PREFETCH_WORKERS,
    ) -> None:
        self._paths = CachePaths(cache_root, sub_dir)
        self._store = CacheStore(fs)
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport(timeout=timeout)
        self._coordinator = DownloadCoordinator(self._transport, self._store)
        self._prefetcher = PrefetchScheduler(self, max_workers=prefetch_workers)
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_config(cls, config: Mapping[str, Any], **kwargs: Any) -> CacheManager:
        """Build a manager from a merged config dict (see load_config_hierarchy).

        Keyword arguments override config values and pass collaborators
        (fs, transport) through. Raises ConfigError for a timeout or worker
        count that is not a positive number.
        """
        params: dict[str, Any] = {
            "cache_root": config.get("cache_root") or DEFAULT_CACHE_ROOT,
            "sub_dir": config.get("sub_dir") or DEFAULT_SUB_DIR,
            "timeout": config.get("timeout", DEFAULT_TIMEOUT_SECONDS),
            "prefetch_workers": config.get("prefetch_workers", DEFAULT_PREFETCH_WORKERS),
        }
        params.update(kwargs)
        params["timeout"] = _positive("timeout", params["timeout"], float)
        if params["prefetch_workers"] is not None:
            params["prefetch_workers"] = _positive(
                "prefetch_workers", params["prefetch_workers"], int
            )
        return cls(**params)

    @property
    def base_dir(self) -> Path:
        return self._paths.base_dir

    @property
    def coordinator(self) -> DownloadCoordinator:
        return self._coordinator

    @staticmethod
    def is_cacheable(url: object) -> bool:
        return is_cacheable(url)

    def resolve_path(self, url: str, options: CacheOptions | None = None) -> Path:
        return self._paths.resolve_path(url, options or DEFAULT_OPTIONS)

    async def get_cached_image_path(self, url: str, options: CacheOptions | None = None) -> Path:
        """Return the path of a valid cached file for url.

        Raises CacheMissError if the file is absent, not a regular file, or
        empty (an empty file is deleted first).
        """
        file_path = self.resolve_path(url, options)
        if not await self._store.is_valid_cached_file(file_path):
            self._misses += 1
            raise CacheMissError(f"Failed to get image from cache: {url}", path=file_path)
        self._hits += 1
        return file_path

    async def is_cached(self, url: str, options: CacheOptions | None = None) -> bool:
        try:
            await self.get_cached_image_path(url, options)
        except CacheMissError:
            return False
        return True

    async def cache_image(
        self,
        url: str,
        options: CacheOptions | None = None,
        headers_resolver: HeadersResolver | None = None,
    ) -> Path:
        """Download url into the cache and return its path.

        Concurrent calls resolving to the same path share one download.
        headers_resolver takes precedence over options.headers_resolver.
        """
        if not is_cacheable(url):
            raise InvalidUrlError(f"URL is not cacheable: {url!r}", url=url)
        options = options or DEFAULT_OPTIONS
        file_path = self.resolve_path(url, options)
        await self._store.ensure_directory(file_path)
        headers = await _resolve_headers(headers_resolver or options.headers_resolver)
        return await self._coordinator.fetch_and_store(url, file_path, headers)

    async def delete_cached_image(self, url: str, options: CacheOptions | None = None) -> None:
        """Delete the cached file for url. Absent files are not an error."""
        await self._store.delete_file(self.resolve_path(url, options))

    async def cache_multiple_images(
        self, urls: list[str], options: CacheOptions | None = None
    ) -> PrefetchReport:
        """Prefetch a batch of URLs concurrently, skipping non-cacheable ones."""
        return await self._prefetcher.prefetch_all(list(urls), options or DEFAULT_OPTIONS)

    async def delete_multiple_cached_images(
        self, urls: list[str], options: CacheOptions | None = None
    ) -> None:
        """Delete cached files one at a time, in input order."""
        for url in urls:
            await self.delete_cached_image(url, options)

    async def clear_cache(self) -> None:
        """Remove every cached file and recreate an empty base directory."""
        base_dir = self._paths.base_dir
        await self._store.delete_tree(base_dir)
        try:
            await self._store.ensure_base(base_dir)
        except FilesystemError as e:
            logger.warning("Could not recreate cache directory %s: %s", base_dir, e)
        logger.info("Cleared cache at %s", base_dir)

    async def stats(self) -> CacheStats:
        """Return on-disk footprint plus hit, miss and download counters."""
        file_count, size_bytes = await self._store.collect_stats(self._paths.base_dir)
        return CacheStats(
            file_count=file_count,
            size_bytes=size_bytes,
            hits=self._hits,
            misses=self._misses,
            downloads=self._coordinator.downloads_started,
        )

    async def close(self) -> None:
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> CacheManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


async def _resolve_headers(resolver: HeadersResolver | None) -> dict[str, str]:
    if resolver is None:
        return {}
    headers = resolver()
    if inspect.isawaitable(headers):
        headers = await headers
    return dict(headers or {})


def _positive(key: str, value: Any, convert: type) -> Any:
    # Env vars arrive as strings; YAML may give any scalar
    if isinstance(value, bool):
        raise ConfigError(f"Invalid {key}: {value!r}", key=key, value=value)
    try:
        number = convert(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid {key}: {value!r}", key=key, value=value) from e
    if number <= 0:
        raise ConfigError(f"{key} must be positive, got {value!r}", key=key, value=value)
    return number
