"""
Pull-based byte sources.

A source hands out raw chunks one ``await read()`` at a time and returns None
once the input is exhausted. ``close()`` releases whatever the source holds
(file handle, HTTP connection, generator) and is safe to call more than once.

Implementations:
- BytesSource: in-memory bytes, sliced into fixed-size chunks
- IterableSource: any iterable or async iterable of bytes
- FileSource: a local file (or an already open binary handle such as stdin)
- HttpSource: a remote CSV streamed over HTTP with aiohttp
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    BinaryIO,
    Iterable,
    Iterator,
    Optional,
    Protocol,
    Union,
)

import aiohttp

from .config import DEFAULT_READ_SIZE, DEFAULT_TIMEOUT, SourceConfig, require_positive_int
from .errors import CsvToolsError, SourceReadError


class ByteSource(Protocol):
    """Anything that can be pulled chunk by chunk and then released."""

    async def read(self) -> Optional[bytes]:
        """Return the next chunk, or None at end of input."""
        ...

    async def close(self) -> None:
        """Release the underlying resource."""
        ...


async def read_chunk(source: ByteSource) -> Optional[bytes]:
    """
    Request the next chunk from ``source``.

    Any failure other than our own errors is wrapped in SourceReadError.
    """
    try:
        chunk = await source.read()
    except CsvToolsError:
        raise
    except Exception as e:
        raise SourceReadError(
            f"Failed to read from {describe_source(source)}: {e}",
            source=describe_source(source),
        ) from e

    if chunk is not None and not isinstance(chunk, (bytes, bytearray, memoryview)):
        raise SourceReadError(
            f"{describe_source(source)} produced {type(chunk).__name__}, expected bytes",
            source=describe_source(source),
        )
    return None if chunk is None else bytes(chunk)


def describe_source(source: Any) -> str:
    """Short human readable name for log and error messages."""
    name = getattr(source, "name", None)
    return str(name) if name else type(source).__name__


class BytesSource:
    """
    Serve an in-memory byte string in ``read_size`` slices.

    Args:
        data: Complete input
        read_size: Bytes per chunk
    """

    name = "<bytes>"

    def __init__(self, data: bytes, read_size: int = DEFAULT_READ_SIZE):
        self.data = bytes(data)
        self.read_size = require_positive_int(read_size, "read_size")
        self._position = 0
        self.closed = False

    @classmethod
    def from_text(
        cls, text: str, encoding: str = "utf-8", read_size: int = DEFAULT_READ_SIZE
    ) -> "BytesSource":
        """Encode ``text`` and serve the result."""
        return cls(text.encode(encoding), read_size=read_size)

    async def read(self) -> Optional[bytes]:
        if self.closed or self._position >= len(self.data):
            return None
        chunk = self.data[self._position:self._position + self.read_size]
        self._position += len(chunk)
        return chunk

    async def close(self) -> None:
        self.closed = True


class IterableSource:
    """
    Adapt a sync or async iterable of byte chunks.

    Empty chunks are passed through; only exhaustion ends the input.
    Generators are closed when the source is closed.
    """

    name = "<iterable>"

    def __init__(self, chunks: Union[Iterable[bytes], AsyncIterable[bytes]]):
        self._chunks = chunks
        self._iterator: Optional[Union[Iterator[bytes], AsyncIterator[bytes]]] = None
        self._exhausted = False
        self.closed = False

    async def read(self) -> Optional[bytes]:
        if self.closed or self._exhausted:
            return None

        if self._iterator is None:
            if hasattr(self._chunks, "__aiter__"):
                self._iterator = self._chunks.__aiter__()
            else:
                self._iterator = iter(self._chunks)

        try:
            if hasattr(self._iterator, "__anext__"):
                return await self._iterator.__anext__()
            return next(self._iterator)
        except (StopIteration, StopAsyncIteration):
            self._exhausted = True
            return None

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        iterator = self._iterator
        if iterator is None:
            return
        if hasattr(iterator, "aclose"):
            await iterator.aclose()
        elif hasattr(iterator, "close"):
            iterator.close()


class FileSource:
    """
    Read a local file in chunks without loading it.

    Blocking reads run in a worker thread so the event loop stays free.
    The file is opened on the first read, so creating the source is cheap and
    never fails.

    Args:
        path: File to read (None when wrapping an open handle)
        read_size: Bytes per chunk
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]],
        read_size: int = DEFAULT_READ_SIZE,
    ):
        self.path = Path(path) if path is not None else None
        self.name = str(path)
        self.read_size = require_positive_int(read_size, "read_size")
        self._handle: Optional[BinaryIO] = None
        self._close_handle = True
        self.closed = False

    @classmethod
    def from_handle(
        cls,
        handle: BinaryIO,
        read_size: int = DEFAULT_READ_SIZE,
        close_handle: bool = False,
    ) -> "FileSource":
        """Wrap an already open binary handle (e.g. ``sys.stdin.buffer``)."""
        # name may be an int for handles opened from a file descriptor
        source = cls(None, read_size=read_size)
        source.name = str(getattr(handle, "name", "<stream>"))
        source._handle = handle
        source._close_handle = close_handle
        return source

    async def read(self) -> Optional[bytes]:
        if self.closed:
            return None
        if self._handle is None:
            self._handle = await asyncio.to_thread(open, self.path, 'rb')
            logging.debug(f"Opened {self.name}")

        chunk = await asyncio.to_thread(self._handle.read, self.read_size)
        return chunk or None

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._handle is not None and self._close_handle:
            self._handle.close()
            logging.debug(f"Closed {self.name}")
        self._handle = None


class HttpSource:
    """
    Stream a remote CSV over HTTP.

    The session and request are created on the first read; the response body
    is then pulled ``read_size`` bytes at a time. Non-2xx responses are
    reported as SourceReadError.

    Args:
        url: Address of the CSV
        read_size: Maximum bytes per chunk
        timeout: Total request timeout in seconds
        verify_ssl: Whether to verify TLS certificates
    """

    def __init__(
        self,
        url: str,
        read_size: int = DEFAULT_READ_SIZE,
        timeout: int = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
    ):
        self.url = url
        self.name = url
        self.read_size = require_positive_int(read_size, "read_size")
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.status: Optional[int] = None
        self._session: Optional[aiohttp.ClientSession] = None
        self._response: Optional[aiohttp.ClientResponse] = None
        self.closed = False

    async def _open(self) -> aiohttp.ClientResponse:
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        self._response = await self._session.get(self.url, ssl=self.verify_ssl)
        self.status = self._response.status
        logging.debug(f"GET {self.url} -> {self.status}")

        if not 200 <= self.status < 300:
            raise SourceReadError(
                f"Non-2xx response from {self.url}: {self.status}",
                source=self.url,
            )
        return self._response

    async def read(self) -> Optional[bytes]:
        if self.closed:
            return None
        response = self._response or await self._open()
        chunk = await response.content.read(self.read_size)
        return chunk or None

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._response is not None:
            self._response.release()
            self._response = None
        if self._session is not None:
            await self._session.close()
            self._session = None


def open_source(location: str, config: Optional[SourceConfig] = None) -> ByteSource:
    """
    Create the right source for a CLI location.

    ``http://`` and ``https://`` locations are fetched, ``-`` reads stdin and
    anything else is treated as a local path.
    """
    config = config or SourceConfig()
    if location.startswith(("http://", "https://")):
        return HttpSource(
            location,
            read_size=config.read_size,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
        )
    if location == "-":
        return FileSource.from_handle(sys.stdin.buffer, read_size=config.read_size)
    return FileSource(location, read_size=config.read_size)
