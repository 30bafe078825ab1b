"""Bulk prefetch: a worker pool draining a shared URL queue."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import TYPE_CHECKING

from imgcache.types import DEFAULT_OPTIONS, CacheOptions, PrefetchReport

if TYPE_CHECKING:
    from imgcache.cache.manager import CacheManager

logger = logging.getLogger(__name__)


class PrefetchScheduler:
    """Populates the cache for a batch of URLs.

    Workers pop URLs from one shared queue until it is empty. By default one
    worker is spawned per URL; duplicate URLs are not removed up front, the
    download coordinator collapses concurrent fetches of the same path.
    ``max_workers`` caps the fan-out.
    """

    def __init__(self, manager: CacheManager, max_workers: int | None = None) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._manager = manager
        self._max_workers = max_workers

    async def prefetch_all(
        self,
        urls: list[str],
        options: CacheOptions = DEFAULT_OPTIONS,
    ) -> PrefetchReport:
        """Cache every cacheable URL not already cached.

        Non-cacheable URLs are skipped. A failing URL is logged and counted;
        it never stops the other workers.
        """
        queue: deque[str] = deque(urls)
        report = PrefetchReport(total=len(urls))

        num_workers = len(urls)
        if self._max_workers is not None:
            num_workers = min(num_workers, self._max_workers)

        async def worker() -> None:
            while True:
                try:
                    url = queue.popleft()
                except IndexError:
                    return
                if not self._manager.is_cacheable(url):
                    report.skipped += 1
                    continue
                try:
                    if await self._manager.is_cached(url, options):
                        report.already_cached += 1
                    else:
                        await self._manager.cache_image(url, options)
                        report.cached += 1
                except Exception as e:
                    report.failed += 1
                    logger.warning("Prefetch of %s failed: %s", url, e)

        await asyncio.gather(*(worker() for _ in range(num_workers)))

        logger.info(
            "Prefetch done: %d cached, %d already cached, %d skipped, %d failed",
            report.cached,
            report.already_cached,
            report.skipped,
            report.failed,
        )
        return report
