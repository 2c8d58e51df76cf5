"""
ssestream - Core Data Models

Messages, handler sets and engine parameters shared by the engine and
the provider plugins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Union

from .debug import DebugConfig

if TYPE_CHECKING:
    from ..plugins.base import ProviderPlugin


# ============================================================
# Enums
# ============================================================

class Role(str, Enum):
    """Message roles."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


# ============================================================
# Messages
# ============================================================

@dataclass(frozen=True)
class SSEMessage:
    """A message reported to a lifecycle handler."""
    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def assistant(cls, content: str = "") -> "SSEMessage":
        return cls(role=Role.ASSISTANT, content=content)


# ============================================================
# Handlers
# ============================================================

MessageHandler = Callable[[SSEMessage], Union[None, Awaitable[None]]]
ErrorHandler = Callable[[Exception, SSEMessage], Union[None, Awaitable[None]]]


@dataclass
class SSEEngineHandlers:
    """
    Lifecycle callbacks. Every handler is optional.

    - on_system_message: once before streaming, only if a system message is set
    - on_user_message: once before streaming
    - on_partial: every non-empty text increment (assistant role)
    - on_done: stream completed; content is the full aggregate
    - on_error: stream failed; content is the aggregate at failure time

    Handlers may be plain functions or coroutine functions.
    """
    on_system_message: Optional[MessageHandler] = None
    on_user_message: Optional[MessageHandler] = None
    on_partial: Optional[MessageHandler] = None
    on_done: Optional[MessageHandler] = None
    on_error: Optional[ErrorHandler] = None


# ============================================================
# Engine parameters
# ============================================================

@dataclass
class SSEEngineParams:
    """Everything the engine (and the plugin's request preparation) needs."""
    user_message: str
    plugin: "ProviderPlugin"
    handlers: SSEEngineHandlers = field(default_factory=SSEEngineHandlers)
    system_message: Optional[str] = None

    # Provider settings (model, temperature, response_format, ...)
    options: Dict[str, Any] = field(default_factory=dict)

    debug: DebugConfig = False
