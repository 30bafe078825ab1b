"""I/O collaborators: filesystem and HTTP transport."""

from imgcache.io.filesystem import FileSystem, LocalFileSystem
from imgcache.io.transport import HttpxTransport, Transport

__all__ = ["FileSystem", "LocalFileSystem", "Transport", "HttpxTransport"]
