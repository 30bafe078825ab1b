"""Cache key generation: content-addressed, query-policy-aware."""

from __future__ import annotations

import hashlib
from urllib.parse import SplitResult, parse_qsl, urlsplit

from imgcache.config.defaults import DEFAULT_EXTENSION
from imgcache.errors.exceptions import InvalidUrlError
from imgcache.types import DEFAULT_OPTIONS, CacheOptions


def derive_cache_key(url: str, options: CacheOptions = DEFAULT_OPTIONS) -> str:
    """Generate a SHA1 cache key for a URL, suffixed with its file extension.

    The key covers the directory path, the filename, the extension and the
    query values selected by ``options.use_query_params_in_cache_key``. The
    host is not part of the key; it selects the cache group directory.
    """
    parsed = parse_url(url)

    path_parts = parsed.path.split("/")
    # Last path part is the file name
    file_name = path_parts.pop()
    file_path = "/".join(path_parts)

    name_parts = file_name.split(".")
    extension = name_parts[-1] if len(name_parts) > 1 else DEFAULT_EXTENSION

    query = query_for_cache_key(parsed.query, options.use_query_params_in_cache_key)
    cacheable = file_path + file_name + extension + query
    return hashlib.sha1(cacheable.encode("utf-8")).hexdigest() + "." + extension


def query_for_cache_key(query: str, use_query_params: bool | list[str]) -> str:
    """Serialize the query values that take part in the key.

    Values are ordered by parameter name and joined with commas. Only the
    first occurrence of a repeated parameter counts.
    """
    if not use_query_params:
        return ""

    params: dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, value)

    if isinstance(use_query_params, list):
        params = {k: v for k, v in params.items() if k in use_query_params}

    return ",".join(value for _, value in sorted(params.items()))


def url_host(url: str) -> str:
    """Return host[:port] of a URL, lowercased, without userinfo."""
    netloc = parse_url(url).netloc
    return netloc.rpartition("@")[2].lower()


def parse_url(url: str) -> SplitResult:
    if not isinstance(url, str):
        raise InvalidUrlError(f"URL must be a string, got {type(url).__name__}", url=url)
    try:
        return urlsplit(url)
    except ValueError as e:
        raise InvalidUrlError(f"Cannot parse URL {url!r}: {e}", url=url) from e
