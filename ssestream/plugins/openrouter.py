"""
ssestream - OpenRouter Provider Plugin

Streams OpenAI-compatible chat completions from OpenRouter.
Events are "data: {...}" blocks separated by a blank line; the stream
ends with "data: [DONE]". OpenRouter also sends ": OPENROUTER PROCESSING"
keep-alive comments, which the engine drops before parsing.
"""

import json
from typing import Any, Dict, List, Optional

import httpx

from .base import DONE, HTTPProviderPlugin, PluginConfig
from ..config import get_openrouter_api_key, get_openrouter_base_url
from ..core.models import SSEEngineParams


class OpenRouterPlugin(HTTPProviderPlugin):
    """Plugin for OpenRouter chat completions (plain text streaming)."""

    name = "openrouter"
    delimiter = "\n\n"
    DEFAULT_MODEL = "deepseek/deepseek-chat"

    def __init__(
        self,
        config: Optional[PluginConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        system_message: Optional[str] = None
    ):
        super().__init__(config, client)
        self.api_key = self.config.api_key or get_openrouter_api_key()
        self.system_message = system_message

    def default_base_url(self) -> str:
        return get_openrouter_base_url()

    def _headers(self, params: SSEEngineParams) -> Dict[str, str]:
        headers = super()._headers(params)
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _build_messages(self, params: SSEEngineParams) -> List[Dict[str, str]]:
        messages = []
        system_message = params.system_message or self.system_message
        if system_message:
            messages.append({"role": "system", "content": system_message})
        messages.append({"role": "user", "content": params.user_message})
        return messages

    def _build_payload(self, params: SSEEngineParams) -> Dict[str, Any]:
        options = params.options or {}
        return {
            "model": options.get("model") or self.DEFAULT_MODEL,
            "messages": self._build_messages(params),
            **options,
            "stream": True,
        }

    async def prepare_request(self, params: SSEEngineParams) -> httpx.Response:
        """Start a streaming /chat/completions call."""
        payload = self._build_payload(params)

        self._trace(params, "Preparing OpenRouter request", model=payload["model"], url=self.base_url)

        response = await self._open_stream(
            "/chat/completions",
            payload,
            self._headers(params)
        )

        self._trace(params, "OpenRouter stream opened", status_code=response.status_code)
        return response

    @staticmethod
    def _data_payload(line: str) -> Optional[str]:
        """Strip the "data:" field name; None for other SSE fields."""
        if not line.startswith("data:"):
            return None
        return line[len("data:"):].strip()

    @staticmethod
    def _first_choice(json_string: str) -> Optional[Dict[str, Any]]:
        try:
            parsed = json.loads(json_string)
        except json.JSONDecodeError:
            return None
        if not isinstance(parsed, dict):
            return None
        choices = parsed.get("choices")
        if not isinstance(choices, list) or not choices:
            return None
        choice = choices[0]
        return choice if isinstance(choice, dict) else None

    def parse_server_sent_event(self, line: str) -> Optional[str]:
        json_string = self._data_payload(line)
        if json_string is None:
            return None

        if json_string == DONE:
            return DONE

        choice = self._first_choice(json_string)
        if choice is None:
            return None

        delta = choice.get("delta")
        if isinstance(delta, dict):
            content = delta.get("content")
            if isinstance(content, str) and content:
                return content

        return None
