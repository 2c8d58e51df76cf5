"""
ssestream - Frame Splitting

Framing happens in two steps:
1. The decoded text buffer is split on the plugin's delimiter into frames.
   The trailing fragment may be incomplete (a delimiter can be cut by a
   chunk boundary), so it stays in the buffer.
2. Each frame is split into lines; blank lines and SSE comments (":")
   are dropped and the rest go to the plugin's line parser.
"""

from typing import Callable, List, NamedTuple, Optional, Tuple

from ..plugins.base import DONE

COMMENT_PREFIX = ":"

LineParser = Callable[[str], Optional[str]]


class FrameResult(NamedTuple):
    """Text extracted from one frame, or done=True if it carried DONE."""
    text: str
    done: bool = False


def split_frames(buffer: str, delimiter: str) -> Tuple[List[str], str]:
    """
    Split buffer into complete frames and the unconsumed rest.

    Returns:
        (frames in arrival order, new buffer)
    """
    pieces = buffer.split(delimiter)
    return pieces[:-1], pieces[-1]


def event_lines(frame: str) -> List[str]:
    """Trimmed, non-empty, non-comment lines of a frame."""
    lines = (line.strip() for line in frame.split("\n"))
    return [line for line in lines if line and not line.startswith(COMMENT_PREFIX)]


def parse_frame(frame: str, parser: LineParser) -> FrameResult:
    """
    Run every line of a frame through the plugin's parser.

    DONE wins over text already parsed from earlier lines of the same frame.
    """
    parts: List[str] = []
    for line in event_lines(frame):
        parsed = parser(line)
        if parsed == DONE:
            return FrameResult(text="", done=True)
        if parsed:
            parts.append(parsed)
    return FrameResult(text="".join(parts))
