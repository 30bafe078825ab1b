"""Download coordinator: at most one in-flight download per storage path."""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from collections.abc import Mapping
from pathlib import Path

from imgcache.cache.store import CacheStore
from imgcache.errors.exceptions import TransportError
from imgcache.io.transport import Transport, partial_path

logger = logging.getLogger(__name__)


class DownloadCoordinator:
    """Deduplicates concurrent fetches keyed by destination path.

    The first request for a path starts a download task; later requests for
    the same path join it until it settles. Settled entries are removed, so a
    request after a failure starts a fresh download.

    Callers await the shared task through ``asyncio.shield``: a caller that is
    cancelled stops waiting, but the download carries on for the others.

    The table may be used from several threads, each running its own event
    loop. A download can only be joined from the loop that started it.
    """

    def __init__(self, transport: Transport, store: CacheStore) -> None:
        self._transport = transport
        self._store = store
        self._active: dict[Path, asyncio.Task[Path]] = {}
        # Check-then-insert and remove-on-settle happen under this lock
        self._lock = threading.Lock()
        self._downloads_started = 0

    @property
    def active_downloads(self) -> int:
        with self._lock:
            return len(self._active)

    @property
    def downloads_started(self) -> int:
        return self._downloads_started

    def is_active(self, destination: Path) -> bool:
        with self._lock:
            return destination in self._active

    async def fetch_and_store(
        self,
        source_url: str,
        destination: Path,
        headers: Mapping[str, str] | None = None,
    ) -> Path:
        """Download source_url to destination, joining an active download if any.

        Returns destination once the file is stored. Raises TransportError if
        the download fails; any partial file is removed first.
        """
        loop = asyncio.get_running_loop()
        with self._lock:
            task = self._active.get(destination)
            if task is not None and task.get_loop() is not loop:
                raise RuntimeError(
                    f"Download to {destination} is running on another event loop"
                )
            if task is None:
                task = loop.create_task(
                    self._download(source_url, destination, dict(headers or {}))
                )
                task.add_done_callback(functools.partial(self._settle, destination))
                self._active[destination] = task
                self._downloads_started += 1
                logger.info("Downloading %s -> %s", source_url, destination)
            else:
                logger.debug("Joining active download for %s", destination)

        return await asyncio.shield(task)

    async def _download(
        self, source_url: str, destination: Path, headers: dict[str, str]
    ) -> Path:
        try:
            await self._transport.fetch("GET", source_url, headers, destination)
        except asyncio.CancelledError:
            await self._discard(destination)
            raise
        except TransportError:
            await self._discard(destination)
            raise
        except Exception as exc:
            await self._discard(destination)
            raise TransportError(
                f"Download of {source_url} failed: {exc}", url=source_url, original=exc
            ) from exc
        logger.info("Stored %s", destination)
        return destination

    async def _discard(self, destination: Path) -> None:
        await self._store.delete_file(partial_path(destination))
        await self._store.delete_file(destination)

    def _settle(self, destination: Path, task: asyncio.Task[Path]) -> None:
        with self._lock:
            if self._active.get(destination) is task:
                del self._active[destination]
        if task.cancelled():
            return
        # Retrieve the exception so an unawaited failure is not reported twice
        exc = task.exception()
        if exc is not None:
            logger.warning("Download to %s failed: %s", destination, exc)
