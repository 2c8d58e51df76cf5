"""
ssestream Core Module

Data models, debug gate and error taxonomy.
"""

from .models import (
    Role,
    SSEMessage,
    SSEEngineHandlers,
    SSEEngineParams,
)
from .debug import (
    DebugCategory,
    DebugOptions,
    is_debug_enabled,
)
from .errors import (
    ErrorType,
    ErrorDetails,
    SSEStreamException,
    PrepareError,
    ProviderRequestError,
    ProviderTimeoutError,
    ProviderConnectionError,
    PayloadError,
    handle_httpx_error,
)

__all__ = [
    # Models
    "Role",
    "SSEMessage",
    "SSEEngineHandlers",
    "SSEEngineParams",

    # Debug
    "DebugCategory",
    "DebugOptions",
    "is_debug_enabled",

    # Errors
    "ErrorType",
    "ErrorDetails",
    "SSEStreamException",
    "PrepareError",
    "ProviderRequestError",
    "ProviderTimeoutError",
    "ProviderConnectionError",
    "PayloadError",
    "handle_httpx_error",
]
