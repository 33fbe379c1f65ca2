"""Document payload attached after the attribute section.

A payload is read once, front to back, and never copied into memory as a
whole. Readers expose ``read(n)``/``readexactly(n)`` coroutines compatible
with :class:`asyncio.StreamReader` and can be iterated with ``async for``,
which is what ``httpx`` expects for a streamed request body.
"""

from __future__ import annotations

import asyncio
import inspect
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, List, Optional

from .errors import PayloadConsumedError
from .logging_config import log

DEFAULT_CHUNK_SIZE = 64 * 1024


class AsyncByteReader(ABC):
    """Shared helpers for readers that implement ``read(n)``."""

    chunk_size: int = DEFAULT_CHUNK_SIZE

    @abstractmethod
    async def read(self, n: int = -1) -> bytes:
        """Read up to ``n`` bytes; ``n < 0`` reads to the end. Returns ``b""`` at EOF."""

    async def aclose(self) -> None:
        return None

    async def readexactly(self, n: int) -> bytes:
        """Read exactly ``n`` bytes.

        Raises:
            asyncio.IncompleteReadError: If the source ends first.
        """
        data = bytearray()
        while len(data) < n:
            chunk = await self.read(n - len(data))
            if not chunk:
                raise asyncio.IncompleteReadError(bytes(data), n)
            data.extend(chunk)
        return bytes(data)

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._chunks()

    async def _chunks(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.read(self.chunk_size)
            if not chunk:
                return
            yield chunk


class PayloadReader(AsyncByteReader):
    """Forward-only reader over one payload source.

    Supported sources: ``bytes``-like objects, objects with a coroutine
    ``read(n)`` (``asyncio.StreamReader``), async iterables of byte chunks and
    blocking binary file objects, which are read in a worker thread.
    """

    def __init__(self, source: Any, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self._buffer = bytearray()
        self._closed = False
        self._view: Optional[memoryview] = None
        self._async_read = None
        self._sync_read = None
        self._iterator: Optional[AsyncIterator[bytes]] = None

        if isinstance(source, (bytes, bytearray, memoryview)):
            self._view = memoryview(source).cast("B")
        elif inspect.iscoroutinefunction(getattr(source, "read", None)):
            self._async_read = source.read
        elif hasattr(source, "__aiter__"):
            self._iterator = source.__aiter__()
        elif callable(getattr(source, "read", None)):
            self._sync_read = source.read
        else:
            raise TypeError(f"Unsupported payload source {type(source).__name__}")

    async def read(self, n: int = -1) -> bytes:
        """Read up to ``n`` bytes; ``n < 0`` reads to the end. Returns ``b""`` at EOF."""
        if self._closed or n == 0:
            return b""
        if n < 0:
            parts: List[bytes] = [bytes(self._buffer)]
            self._buffer.clear()
            while True:
                chunk = await self._pull(self.chunk_size)
                if not chunk:
                    return b"".join(parts)
                parts.append(chunk)
        if self._buffer:
            data = bytes(self._buffer[:n])
            del self._buffer[:n]
            return data
        chunk = await self._pull(n)
        if len(chunk) > n:
            self._buffer.extend(chunk[n:])
            chunk = chunk[:n]
        return chunk

    async def _pull(self, n: int) -> bytes:
        """Fetch the next piece from the source; may return more than ``n`` bytes."""
        if self._view is not None:
            data = bytes(self._view[:n])
            self._view = self._view[n:]
            return data
        if self._async_read is not None:
            return bytes(await self._async_read(n))
        if self._sync_read is not None:
            return bytes(await asyncio.to_thread(self._sync_read, n) or b"")
        while True:
            try:
                chunk = await self._iterator.__anext__()
            except StopAsyncIteration:
                return b""
            if chunk:
                return bytes(chunk)

    async def aclose(self) -> None:
        """Drop buffered data and stop iterating the source."""
        if self._closed:
            return
        self._closed = True
        self._buffer.clear()
        self._view = None
        closer = getattr(self._iterator, "aclose", None)
        if closer is not None:
            await closer()


class ChainedReader(AsyncByteReader):
    """Reads several readers back to back, moving on when one is exhausted."""

    def __init__(self, *readers: AsyncByteReader, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.chunk_size = chunk_size
        self._readers = list(readers)

    async def read(self, n: int = -1) -> bytes:
        if n == 0:
            return b""
        if n < 0:
            parts = []
            while self._readers:
                parts.append(await self._readers[0].read(-1))
                self._readers.pop(0)
            return b"".join(parts)
        while self._readers:
            data = await self._readers[0].read(n)
            if data:
                return data
            self._readers.pop(0)
        return b""

    async def aclose(self) -> None:
        readers, self._readers = self._readers, []
        for reader in readers:
            await reader.aclose()


class IppPayload:
    """Opaque document data of unknown length, consumed exactly once."""

    def __init__(self, source: Any):
        self._source = source
        self._consumed = False

    @property
    def consumed(self) -> bool:
        return self._consumed

    def into_reader(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> PayloadReader:
        """Hand the payload over to a reader.

        Raises:
            PayloadConsumedError: If a reader was already created.
        """
        if self._consumed:
            raise PayloadConsumedError("Payload has already been handed to a reader")
        self._consumed = True
        source, self._source = self._source, None
        log.debug("Creating payload reader for %s", type(source).__name__)
        return PayloadReader(source, chunk_size=chunk_size)
