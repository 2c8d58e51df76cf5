"""
ssestream - Testing Helpers

Offline stand-ins for provider streams.
"""

import asyncio
from typing import AsyncIterator, Iterable

from .plugins.base import DEFAULT_DELIMITER, DONE


async def create_mock_sse_stream(
    messages: Iterable[str],
    *,
    end_with_done: bool = True,
    delay: float = 0.0,
    prefix: str = "data: ",
    delimiter: str = DEFAULT_DELIMITER,
) -> AsyncIterator[bytes]:
    """
    Yield one SSE event per message as UTF-8 bytes.

    Args:
        messages: Event payloads, e.g. JSON strings
        end_with_done: Append a final "data: [DONE]" event
        delay: Seconds to sleep between events
        prefix: Field prefix for every event
        delimiter: Event separator
    """
    for message in messages:
        yield f"{prefix}{message}{delimiter}".encode("utf-8")
        if delay:
            await asyncio.sleep(delay)

    if end_with_done:
        yield f"{prefix}{DONE}{delimiter}".encode("utf-8")


async def iter_chunks(data: bytes, size: int) -> AsyncIterator[bytes]:
    """Yield data in fixed-size pieces, splitting anywhere (even mid-character)."""
    if size <= 0:
        raise ValueError("size must be positive")
    for start in range(0, len(data), size):
        yield data[start:start + size]
