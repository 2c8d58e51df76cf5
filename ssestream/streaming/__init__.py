"""
ssestream - Streaming Module

The stream engine and its building blocks:
- Upstream byte reader normalization
- Delimiter framing and per-line parsing
- In-band error payload detection
- Outbound byte stream
"""

from .engine import (
    SSEStreamEngine,
    create_sse_stream,
)
from .outbound import (
    SSEOutboundStream,
    OutboundState,
)
from .reader import ByteReader
from .framing import (
    FrameResult,
    split_frames,
    event_lines,
    parse_frame,
)
from .errors import (
    ErrorPayload,
    detect_error_payload,
)

__all__ = [
    # Engine
    "SSEStreamEngine",
    "create_sse_stream",
    # Outbound
    "SSEOutboundStream",
    "OutboundState",
    # Reader
    "ByteReader",
    # Framing
    "FrameResult",
    "split_frames",
    "event_lines",
    "parse_frame",
    # Errors
    "ErrorPayload",
    "detect_error_payload",
]
