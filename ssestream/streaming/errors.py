"""
ssestream - In-band Error Detection

Some providers report failures that happen after the HTTP status was
already sent as an ordinary stream event, e.g.:

    data: {"error": {"message": "Rate limit exceeded", "code": 429}}

The engine checks every complete frame with detect_error_payload() before
handing it to the plugin's line parser. A hit aborts the stream.
"""

import json
from dataclasses import dataclass
from typing import Optional

DATA_PREFIX = "data:"


@dataclass
class ErrorPayload:
    """An error object found inside a frame."""
    message: str
    code: Optional[str] = None
    type: Optional[str] = None


def detect_error_payload(frame: str) -> Optional[ErrorPayload]:
    """
    Inspect one trimmed frame for an embedded error object.

    Never raises: anything that is not a JSON object with a non-empty
    error.message is "not an error".
    """
    text = frame.strip()
    if text.startswith(DATA_PREFIX):
        text = text[len(DATA_PREFIX):].strip()

    if not text.startswith("{"):
        return None

    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        return None

    if not isinstance(parsed, dict):
        return None

    error = parsed.get("error")
    if not isinstance(error, dict):
        return None

    message = error.get("message")
    if not message:
        return None

    code = error.get("code")
    error_type = error.get("type")
    return ErrorPayload(
        message=str(message),
        code=str(code) if code is not None else None,
        type=str(error_type) if error_type is not None else None,
    )
