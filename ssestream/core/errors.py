"""
ssestream - Error Definitions

Error taxonomy for stream instances:
- PREPARE: the plugin could not establish the upstream stream
  (non-success status, missing body, network failure)
- PAYLOAD: the provider delivered an error object inside the stream

Failures of the upstream reader itself are propagated unwrapped.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import httpx


class ErrorType(str, Enum):
    """Error classification."""
    PREPARE = "prepare_error"
    PAYLOAD = "payload_error"


@dataclass
class ErrorDetails:
    """Full error information."""
    code: str
    message: str
    type: ErrorType

    # Context fields
    provider: Optional[str] = None
    status_code: Optional[int] = None

    # Content state at error time
    partial_content: Optional[str] = None

    # Debug fields
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "type": self.type.value,
        }

        if self.provider:
            result["provider"] = self.provider
        if self.status_code is not None:
            result["status_code"] = self.status_code
        if self.partial_content:
            result["partial_content"] = self.partial_content
        if self.details:
            result["details"] = self.details

        return {"error": result}


class SSEStreamException(Exception):
    """Base exception for all ssestream errors."""

    def __init__(self, error: ErrorDetails):
        self.error = error
        super().__init__(error.message)


# ============================================================
# Preparation Errors
# ============================================================

class PrepareError(SSEStreamException):
    """The upstream stream could not be established."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        code: str = "prepare_failed",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            ErrorDetails(
                code=code,
                message=message,
                type=ErrorType.PREPARE,
                provider=provider or None,
                status_code=status_code,
                details=details or {}
            )
        )


class ProviderRequestError(PrepareError):
    """Provider answered with a non-success status or without a body."""

    def __init__(
        self,
        provider: str,
        status_code: Optional[int] = None,
        reason: str = "",
        body: str = ""
    ):
        message = f"{provider} API error: {reason or status_code}"
        if body:
            message = f"{message} - {body}"
        super().__init__(
            message,
            provider=provider,
            code="provider_request_failed",
            status_code=status_code,
            details={"body": body} if body else None
        )


class ProviderTimeoutError(PrepareError):
    """Provider did not respond in time."""

    def __init__(self, provider: str, connect: bool = False):
        phase = "connect to" if connect else "receive a response from"
        super().__init__(
            f"Failed to {phase} {provider} within timeout",
            provider=provider,
            code="connect_timeout" if connect else "read_timeout"
        )


class ProviderConnectionError(PrepareError):
    """Network failure while contacting the provider."""

    def __init__(self, provider: str, reason: str = ""):
        message = f"Could not connect to {provider}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            provider=provider,
            code="connection_failed"
        )


# ============================================================
# In-band Errors
# ============================================================

class PayloadError(SSEStreamException):
    """The provider sent an error object as ordinary stream content."""

    def __init__(
        self,
        message: str,
        partial_content: str = "",
        provider: str = "",
        code: Optional[str] = None,
        error_type: Optional[str] = None
    ):
        details: Dict[str, Any] = {}
        if code is not None:
            details["provider_code"] = code
        if error_type is not None:
            details["provider_type"] = error_type
        super().__init__(
            ErrorDetails(
                code="payload_error",
                message=message,
                type=ErrorType.PAYLOAD,
                provider=provider or None,
                partial_content=partial_content or None,
                details=details
            )
        )


# ============================================================
# httpx error conversion
# ============================================================

def handle_httpx_error(error: Exception, provider: str) -> SSEStreamException:
    """
    Convert an httpx (or unknown) error to a canonical exception.

    Already-canonical exceptions are returned unchanged.
    """
    if isinstance(error, SSEStreamException):
        return error

    if isinstance(error, httpx.TimeoutException):
        return ProviderTimeoutError(
            provider,
            connect=isinstance(error, httpx.ConnectTimeout)
        )

    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        try:
            body = response.text
        except httpx.ResponseNotRead:
            body = ""
        return ProviderRequestError(
            provider,
            status_code=response.status_code,
            reason=response.reason_phrase,
            body=body
        )

    if isinstance(error, httpx.TransportError):
        return ProviderConnectionError(provider, reason=str(error))

    return PrepareError(str(error) or type(error).__name__, provider=provider)
