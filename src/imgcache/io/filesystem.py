"""Filesystem collaborator: the async capability surface the cache calls through."""

from __future__ import annotations

import asyncio
import logging
import shutil
import stat as stat_mod
from collections.abc import Callable
from pathlib import Path
from typing import Protocol, runtime_checkable

from imgcache.errors.exceptions import FilesystemError, NotFoundError
from imgcache.types import FileStat

logger = logging.getLogger(__name__)


@runtime_checkable
class FileSystem(Protocol):
    """Async filesystem operations used by CacheStore."""

    async def stat(self, path: Path) -> FileStat:
        """Return file type and size. Raises NotFoundError if absent."""
        ...

    async def unlink(self, path: Path) -> None: ...

    async def is_dir(self, path: Path) -> bool: ...

    async def mkdir_recursive(self, path: Path) -> None: ...

    async def remove_tree(self, path: Path) -> None: ...

    async def walk_files(self, path: Path) -> list[FileStat]:
        """Return stats for every regular file below path."""
        ...


class LocalFileSystem:
    """FileSystem over pathlib, with blocking calls moved to worker threads."""

    async def stat(self, path: Path) -> FileStat:
        return await asyncio.to_thread(_stat, path)

    async def unlink(self, path: Path) -> None:
        await asyncio.to_thread(_wrap, path.unlink, path)

    async def is_dir(self, path: Path) -> bool:
        return await asyncio.to_thread(path.is_dir)

    async def mkdir_recursive(self, path: Path) -> None:
        await asyncio.to_thread(_wrap, lambda: path.mkdir(parents=True, exist_ok=True), path)

    async def remove_tree(self, path: Path) -> None:
        await asyncio.to_thread(_wrap, lambda: shutil.rmtree(path), path)

    async def walk_files(self, path: Path) -> list[FileStat]:
        return await asyncio.to_thread(_walk_files, path)


def _stat(path: Path) -> FileStat:
    try:
        st = path.stat()
    except FileNotFoundError as e:
        raise NotFoundError(f"No such file or directory: {path}", path=path, original=e) from e
    except OSError as e:
        raise FilesystemError(f"Cannot stat {path}: {e}", path=path, original=e) from e
    return FileStat(is_file=stat_mod.S_ISREG(st.st_mode), size=st.st_size)


def _wrap(fn: Callable[[], object], path: Path) -> None:
    """Run a filesystem call, translating OSError into our hierarchy."""
    try:
        fn()
    except FileNotFoundError as e:
        raise NotFoundError(f"No such file or directory: {path}", path=path, original=e) from e
    except OSError as e:
        raise FilesystemError(f"Filesystem operation failed on {path}: {e}", path=path, original=e) from e


def _walk_files(path: Path) -> list[FileStat]:
    if not path.is_dir():
        return []
    result: list[FileStat] = []
    for entry in path.rglob("*"):
        try:
            st = entry.stat()
        except OSError:
            # Removed concurrently
            continue
        if stat_mod.S_ISREG(st.st_mode):
            result.append(FileStat(is_file=True, size=st.st_size))
    return result
