import asyncio

import pytest

from imgcache.cache.manager import CacheManager


class FakeTransport:
    """In-memory transport that records calls and writes a fixed body.

    If ``gate`` is set, every fetch waits on it before writing. If ``fail`` is
    set, a partial file is written and the exception raised.
    """

    def __init__(self, body=b"\x89PNG fake image", fail=None, gate=None):
        self.body = body
        self.fail = fail
        self.gate = gate
        self.calls = []
        self.closed = False

    async def fetch(self, method, url, headers, destination):
        self.calls.append((method, url, dict(headers), destination))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail is not None:
            destination.write_bytes(b"partial")
            raise self.fail
        destination.write_bytes(self.body)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def make_transport():
    """Factory for FakeTransport instances."""
    return FakeTransport


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def gate():
    return asyncio.Event()


@pytest.fixture
def manager(tmp_path, transport):
    """CacheManager rooted in tmp_path with a fake transport."""
    return CacheManager(cache_root=tmp_path, transport=transport)
