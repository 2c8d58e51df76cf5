"""
ssestream - OpenRouter Structured Output Plugin

Streams structured outputs (JSON Schema "response_format") from OpenRouter.
Besides plain delta text, chunks may carry a refusal or an already-parsed
object under choices[0].message; parsed objects are re-serialized as
compact JSON so they flow through the engine as text.
"""

import json
from typing import Any, Dict, Optional

from .base import DONE
from .openrouter import OpenRouterPlugin
from ..core.models import SSEEngineParams

# Options that become request headers instead of body fields
_HEADER_OPTIONS = {"referrer", "title"}


class OpenRouterStructuredPlugin(OpenRouterPlugin):
    """OpenRouter plugin that understands message.parsed / message.refusal."""

    name = "openrouter-structured"

    def _headers(self, params: SSEEngineParams) -> Dict[str, str]:
        headers = super()._headers(params)
        options = params.options or {}
        if options.get("referrer"):
            headers["HTTP-Referer"] = str(options["referrer"])
        if options.get("title"):
            headers["X-Title"] = str(options["title"])
        return headers

    def _build_payload(self, params: SSEEngineParams) -> Dict[str, Any]:
        payload = super()._build_payload(params)
        for key in _HEADER_OPTIONS:
            payload.pop(key, None)
        return payload

    def parse_server_sent_event(self, line: str) -> Optional[str]:
        json_string = self._data_payload(line)
        if json_string is None:
            return None

        if json_string == DONE:
            return DONE

        choice = self._first_choice(json_string)
        if choice is None:
            return None

        # 1) Normal text streaming
        delta = choice.get("delta")
        if isinstance(delta, dict) and delta.get("content"):
            return str(delta["content"])

        message = choice.get("message")
        if not isinstance(message, dict):
            return None

        # 2) Refusal, then structured output, then plain message text
        if message.get("refusal"):
            return str(message["refusal"])
        if message.get("parsed"):
            return json.dumps(message["parsed"], separators=(",", ":"), ensure_ascii=False)
        if message.get("content"):
            return str(message["content"])

        return None
