"""
ssestream - Outbound Byte Stream

The stream handed back to the caller. The engine pushes UTF-8 text into it
from its own task; the caller pulls with read(), async iteration or aread().

Production is not paced by the consumer: the queue is unbounded, so a slow
reader does not slow down the upstream read.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional


class OutboundState(str, Enum):
    """Lifecycle of an outbound stream."""
    OPEN = "open"
    CLOSED = "closed"
    ERRORED = "errored"
    CANCELLED = "cancelled"


# Marks the end of the queue
_EOF = object()


class SSEOutboundStream:
    """
    Async byte stream with ReadableStream-like producer controls.

    Usage:
        stream = await create_sse_stream(params)
        async with stream:
            async for chunk in stream:
                print(chunk.decode("utf-8"), end="")
    """

    def __init__(self, on_cancel: Optional[Callable[[], Awaitable[None]]] = None):
        self._queue: "asyncio.Queue[object]" = asyncio.Queue()
        self._state = OutboundState.OPEN
        self._error: Optional[BaseException] = None
        self._on_cancel = on_cancel

    @classmethod
    def closed(cls) -> "SSEOutboundStream":
        """An already-closed, empty stream."""
        stream = cls()
        stream.close()
        return stream

    @property
    def state(self) -> OutboundState:
        return self._state

    # ============================================================
    # Producer side
    # ============================================================

    def enqueue(self, data: bytes):
        """Queue a chunk for the consumer."""
        if self._state is not OutboundState.OPEN:
            raise RuntimeError(f"Cannot enqueue into a {self._state.value} stream")
        self._queue.put_nowait(data)

    def close(self):
        """Signal normal end of stream. No-op unless open."""
        if self._state is OutboundState.OPEN:
            self._state = OutboundState.CLOSED
            self._queue.put_nowait(_EOF)

    def error(self, error: BaseException):
        """
        Put the stream in the error state. No-op unless open.

        Chunks queued before the error are still delivered; the error is
        raised once they are consumed.
        """
        if self._state is OutboundState.OPEN:
            self._state = OutboundState.ERRORED
            self._error = error
            self._queue.put_nowait(_EOF)

    # ============================================================
    # Consumer side
    # ============================================================

    async def read(self) -> bytes:
        """
        Next chunk; b"" at end of stream.

        Raises:
            The producer's error once all chunks queued before it are read
        """
        if self._state is OutboundState.CANCELLED:
            return b""

        item = await self._queue.get()
        if item is _EOF:
            # Keep the end marker so every later read ends too
            self._queue.put_nowait(_EOF)
            if self._error is not None:
                raise self._error
            return b""
        return item  # type: ignore[return-value]

    async def aread(self) -> bytes:
        """Read the whole stream."""
        parts = []
        async for chunk in self:
            parts.append(chunk)
        return b"".join(parts)

    async def cancel(self):
        """
        Stop consuming. Discards queued chunks and releases the producer
        (the engine stops its read loop and closes the upstream reader).
        """
        if self._state is OutboundState.CANCELLED:
            return

        was_open = self._state is OutboundState.OPEN
        self._state = OutboundState.CANCELLED

        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_EOF)

        if was_open and self._on_cancel is not None:
            await self._on_cancel()

    def __aiter__(self) -> "SSEOutboundStream":
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.read()
        if not chunk:
            raise StopAsyncIteration
        return chunk

    async def __aenter__(self) -> "SSEOutboundStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._state is OutboundState.OPEN:
            await self.cancel()
