"""
ssestream - Provider-agnostic SSE Streaming Engine

Turns the raw Server-Sent-Events byte stream of a text-generation API into
a clean stream of UTF-8 text plus lifecycle callbacks, with provider wire
formats isolated behind small plugins.
"""

__version__ = "1.0.0"
__author__ = "ssestream"

from .core.models import Role, SSEMessage, SSEEngineHandlers, SSEEngineParams
from .core.debug import DebugCategory, DebugOptions, is_debug_enabled
from .plugins.base import DONE, DEFAULT_DELIMITER, ProviderPlugin, PluginConfig
from .streaming.engine import create_sse_stream
from .streaming.outbound import SSEOutboundStream

__all__ = [
    "Role",
    "SSEMessage",
    "SSEEngineHandlers",
    "SSEEngineParams",
    "DebugCategory",
    "DebugOptions",
    "is_debug_enabled",
    "DONE",
    "DEFAULT_DELIMITER",
    "ProviderPlugin",
    "PluginConfig",
    "create_sse_stream",
    "SSEOutboundStream",
]
