"""
ssestream - Upstream Byte Reader

Normalizes whatever a plugin's prepare_request() returned into a reader
with exactly one pending read at a time and an idempotent release().
"""

from typing import AsyncIterator, Optional

import httpx

from ..plugins.base import ByteSource


class ByteReader:
    """
    Pull-based reader over an httpx streaming response or any async
    iterable of bytes.
    """

    def __init__(self, source: ByteSource):
        self._response: Optional[httpx.Response] = None

        if isinstance(source, httpx.Response):
            self._response = source
            self._iterator: AsyncIterator[bytes] = source.aiter_bytes()
        elif hasattr(source, "__aiter__"):
            self._iterator = source.__aiter__()
        else:
            raise TypeError(
                f"Plugin returned {type(source).__name__}; expected an "
                "httpx.Response or an async iterable of bytes"
            )

        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    async def read(self) -> Optional[bytes]:
        """Next chunk, or None at end of input."""
        if self._released:
            return None
        try:
            return await self._iterator.__anext__()
        except StopAsyncIteration:
            return None

    async def release(self):
        """Close the underlying iterator and response. Safe to call twice."""
        if self._released:
            return
        self._released = True

        aclose = getattr(self._iterator, "aclose", None)
        try:
            if aclose is not None:
                await aclose()
        finally:
            if self._response is not None:
                await self._response.aclose()
