"""
ssestream - Provider Plugin Base

Abstract base class for provider plugins.
Each provider (Ollama, OpenRouter, ...) implements this interface.

The plugin is responsible for:
1. Building the provider-specific request from SSEEngineParams
2. Making the streaming API call
3. Declaring how its raw stream is framed (the delimiter)
4. Extracting text from one framed line

Everything else (decoding, framing, aggregation, callbacks) is the
engine's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, AsyncIterable, Dict, Optional, Union

import httpx

from ..config import get_request_timeout
from ..core.debug import DebugCategory, is_debug_enabled
from ..core.errors import ProviderRequestError, handle_httpx_error
from ..observability.logging import get_logger

if TYPE_CHECKING:
    from ..core.models import SSEEngineParams


# Completion sentinel returned by parse_server_sent_event
DONE = "[DONE]"

# Blank line between events, the SSE default
DEFAULT_DELIMITER = "\n\n"

ByteSource = Union[httpx.Response, AsyncIterable[bytes]]

logger = get_logger(__name__)


@dataclass
class PluginConfig:
    """Configuration for a provider plugin."""
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: Optional[float] = None


class ProviderPlugin(ABC):
    """
    Contract between the stream engine and a provider.

    Plugins are borrowed by the engine for the lifetime of one stream
    instance and never mutated by it.
    """

    name: str = "plugin"

    # Substring separating events in the raw stream; None = DEFAULT_DELIMITER
    delimiter: Optional[str] = None

    @abstractmethod
    async def prepare_request(self, params: "SSEEngineParams") -> ByteSource:
        """
        Start the upstream request.

        Args:
            params: User/system messages, options, handlers, plugin, debug config

        Returns:
            An httpx.Response opened in streaming mode, or any async
            iterable of bytes

        Raises:
            Any exception if the stream cannot be established
        """

    @abstractmethod
    def parse_server_sent_event(self, line: str) -> Optional[str]:
        """
        Extract content from one framed, trimmed, non-comment line.

        Returns:
            Text content, DONE, or None if the line carries no content.
            Must not raise on malformed input.
        """


class HTTPProviderPlugin(ProviderPlugin):
    """
    Shared httpx plumbing for plugins that talk to an HTTP streaming API.

    A client can be injected (e.g. one built on httpx.MockTransport).
    """

    def __init__(
        self,
        config: Optional[PluginConfig] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config or PluginConfig()
        self.base_url = (self.config.base_url or self.default_base_url()).rstrip("/")
        self.client = client or httpx.AsyncClient(
            timeout=self.config.timeout or get_request_timeout()
        )

    def default_base_url(self) -> str:
        """Base URL used when the config does not set one."""
        return ""

    def _headers(self, params: "SSEEngineParams") -> Dict[str, str]:
        """Request headers. Override to add auth."""
        return {"Content-Type": "application/json"}

    async def _open_stream(
        self,
        path: str,
        payload: Dict[str, Any],
        headers: Dict[str, str]
    ) -> httpx.Response:
        """
        POST payload and return the response opened in streaming mode.

        Raises:
            ProviderRequestError: On a non-success status
            PrepareError subclasses: On transport failures
        """
        request = self.client.build_request(
            "POST",
            f"{self.base_url}{path}",
            json=payload,
            headers=headers
        )

        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise handle_httpx_error(e, self.name)

        if not response.is_success:
            try:
                body = (await response.aread()).decode("utf-8", errors="replace")
            except httpx.HTTPError:
                body = ""
            finally:
                await response.aclose()
            raise ProviderRequestError(
                self.name,
                status_code=response.status_code,
                reason=response.reason_phrase,
                body=body.strip()
            )

        return response

    def _trace(self, params: "SSEEngineParams", msg: str, **fields: Any):
        """Log a plugin diagnostic if the plugin debug category is on."""
        if is_debug_enabled(params.debug, DebugCategory.PLUGIN):
            logger.debug(msg, provider=self.name, **fields)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
