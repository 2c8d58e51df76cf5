"""
ssestream - Ollama Provider Plugin

Streams from Ollama's /api/generate endpoint. Ollama emits one JSON object
per line (no SSE "data:" prefix); the final object carries done=true.
"""

import json
from typing import Any, Dict, Optional

import httpx

from .base import DONE, HTTPProviderPlugin
from ..config import get_ollama_base_url
from ..core.models import SSEEngineParams
from ..observability.logging import get_logger

logger = get_logger(__name__)


class OllamaPlugin(HTTPProviderPlugin):
    """
    Plugin for a local Ollama server.

    Final line example (the engine stops there):
        {"model": "llama3", "response": "", "done": true, "done_reason": "stop", ...}
    """

    name = "ollama"
    delimiter = "\n"
    DEFAULT_MODEL = "llama3:latest"

    def default_base_url(self) -> str:
        return get_ollama_base_url()

    async def prepare_request(self, params: SSEEngineParams) -> httpx.Response:
        """Start a streaming /api/generate call."""
        options = params.options or {}

        payload: Dict[str, Any] = {
            "model": options.get("model") or self.DEFAULT_MODEL,
            "prompt": params.user_message,
            "stream": True,
        }
        if params.system_message:
            payload["system"] = params.system_message
        # Other settings (temperature, options, keep_alive, ...) pass through
        payload.update({k: v for k, v in options.items() if k != "model"})
        payload["stream"] = True

        self._trace(params, "Preparing Ollama request", model=payload["model"], url=self.base_url)

        response = await self._open_stream(
            "/api/generate",
            payload,
            self._headers(params)
        )

        self._trace(params, "Ollama stream opened", status_code=response.status_code)
        return response

    def parse_server_sent_event(self, line: str) -> Optional[str]:
        try:
            data = json.loads(line.strip())
        except json.JSONDecodeError:
            # Partial or invalid JSON is ignored
            logger.debug("Ignoring unparseable Ollama line", line=line[:200])
            return None

        if not isinstance(data, dict):
            return None

        if data.get("done"):
            return DONE

        response = data.get("response")
        if isinstance(response, str):
            return response

        return None
