"""HTTP transport collaborator: streams a response body to disk."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

import httpx

from imgcache.config.defaults import DEFAULT_TIMEOUT_SECONDS
from imgcache.errors.exceptions import TransportError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024
_PARTIAL_SUFFIX = ".part"


def partial_path(destination: Path) -> Path:
    """Sibling file a download streams into before it is renamed to destination."""
    return destination.with_name(destination.name + _PARTIAL_SUFFIX)


@runtime_checkable
class Transport(Protocol):
    async def fetch(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        destination: Path,
    ) -> None:
        """Download url into destination. Raises TransportError on failure.

        destination must not appear until the body is complete.
        """
        ...

    async def aclose(self) -> None: ...


class HttpxTransport:
    """Transport backed by an httpx.AsyncClient.

    The body is streamed into a ``.part`` sibling and renamed over destination
    once complete. A client passed in is borrowed and left open by aclose();
    otherwise one is created lazily and owned by the transport.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )
        return self._client

    async def fetch(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        destination: Path,
    ) -> None:
        client = self._get_client()
        try:
            async with client.stream(method, url, headers=dict(headers)) as response:
                if response.is_error:
                    raise TransportError(
                        f"{method} {url} returned HTTP {response.status_code}",
                        url=url,
                        http_status=response.status_code,
                    )
                partial = partial_path(destination)
                with open(partial, "wb") as handle:
                    async for chunk in response.aiter_bytes(_CHUNK_SIZE):
                        handle.write(chunk)
                os.replace(partial, destination)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}", url=url, original=e) from e
        except OSError as e:
            raise TransportError(
                f"Cannot write {url} to {destination}: {e}", url=url, original=e
            ) from e
        logger.debug("Fetched %s -> %s", url, destination)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
