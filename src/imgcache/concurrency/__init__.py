"""Concurrency: bulk prefetch worker pool."""

from imgcache.concurrency.prefetch import PrefetchScheduler

__all__ = ["PrefetchScheduler"]
