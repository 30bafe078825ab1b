"""Shared Pydantic models for imgcache."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping

from pydantic import BaseModel, ConfigDict, field_validator

HeadersResolver = Callable[[], Mapping[str, str] | Awaitable[Mapping[str, str]]]

# ── Config models ──


class CacheOptions(BaseModel):
    """Per-call cache options.

    cache_group overrides the URL host as the directory segment.
    use_query_params_in_cache_key is False (ignore the query), True (all
    params) or a list of param names that take part in the key.
    headers_resolver returns request headers, sync or async.
    """

    model_config = ConfigDict(frozen=True)

    cache_group: str | None = None
    use_query_params_in_cache_key: bool | list[str] = False
    headers_resolver: Callable[..., object] | None = None

    @field_validator("cache_group")
    @classmethod
    def _single_segment(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if not value or value in {".", ".."} or "/" in value or "\\" in value:
            raise ValueError(f"cache_group must be a single path segment, got {value!r}")
        return value


DEFAULT_OPTIONS = CacheOptions()


# ── Result models ──


class FileStat(BaseModel):
    is_file: bool
    size: int = 0


class PrefetchReport(BaseModel):
    """Outcome counters of a bulk prefetch."""

    total: int = 0
    cached: int = 0
    already_cached: int = 0
    skipped: int = 0
    failed: int = 0
