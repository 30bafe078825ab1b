"""Cache statistics model."""

from __future__ import annotations

from pydantic import BaseModel


class CacheStats(BaseModel):
    """On-disk footprint plus lookup and download counters."""

    file_count: int = 0
    size_bytes: int = 0
    hits: int = 0
    misses: int = 0
    downloads: int = 0

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0
