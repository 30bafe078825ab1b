"""Cache store: validity checks, deletion and directory upkeep on disk."""

from __future__ import annotations

import logging
from pathlib import Path

from imgcache.errors.exceptions import NotFoundError
from imgcache.io.filesystem import FileSystem, LocalFileSystem
from imgcache.types import FileStat

logger = logging.getLogger(__name__)


class CacheStore:
    """Thin adapter over the filesystem collaborator.

    Deletion is best-effort housekeeping and never raises. Lookups and
    directory creation surface FilesystemError.
    """

    def __init__(self, fs: FileSystem | None = None) -> None:
        self._fs = fs or LocalFileSystem()

    @property
    def fs(self) -> FileSystem:
        return self._fs

    async def exists(self, path: Path) -> FileStat:
        """Stat path. Raises NotFoundError if it does not exist."""
        return await self._fs.stat(path)

    async def is_valid_cached_file(self, path: Path) -> bool:
        """True iff path is a regular, non-empty file.

        A zero-size file is a failed download: it is deleted here.
        """
        try:
            info = await self.exists(path)
        except NotFoundError:
            return False
        if not info.is_file:
            return False
        if not info.size:
            logger.debug("Removing zero-size cache file %s", path)
            await self.delete_file(path)
            return False
        return True

    async def delete_file(self, path: Path) -> None:
        """Delete path if it is a regular file. Never raises."""
        try:
            info = await self._fs.stat(path)
            if info.is_file:
                await self._fs.unlink(path)
        except NotFoundError:
            pass
        except Exception as e:
            logger.debug("Ignoring failure to delete %s: %s", path, e)

    async def ensure_directory(self, path: Path) -> None:
        """Create the parent directories of a file path if missing."""
        parent = path.parent
        try:
            exists = await self._fs.is_dir(parent)
        except Exception as e:
            logger.debug("Directory check failed for %s: %s", parent, e)
            exists = False
        if not exists:
            await self._fs.mkdir_recursive(parent)

    async def delete_tree(self, path: Path) -> None:
        """Recursively delete a directory. Never raises."""
        try:
            await self._fs.remove_tree(path)
        except NotFoundError:
            pass
        except Exception as e:
            logger.debug("Ignoring failure to remove tree %s: %s", path, e)

    async def ensure_base(self, path: Path) -> None:
        """Create the directory path itself (not just its parent)."""
        await self._fs.mkdir_recursive(path)

    async def collect_stats(self, path: Path) -> tuple[int, int]:
        """Return (file_count, total_bytes) of the regular files below path."""
        files = await self._fs.walk_files(path)
        return len(files), sum(f.size for f in files)
