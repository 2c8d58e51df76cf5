"""
ssestream - Configuration

Environment-driven defaults for provider plugins and diagnostics.
"""

import os
from typing import Optional

from .core.debug import DebugCategory, DebugConfig, DebugOptions

DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_TIMEOUT_SECONDS = 60.0

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"", "0", "false", "no", "off"}


def get_ollama_base_url() -> str:
    """Base URL of the Ollama server."""
    return os.getenv("OLLAMA_BASE_URL", DEFAULT_OLLAMA_BASE_URL).rstrip("/")


def get_openrouter_base_url() -> str:
    """Base URL of the OpenRouter API."""
    return os.getenv("OPENROUTER_BASE_URL", DEFAULT_OPENROUTER_BASE_URL).rstrip("/")


def get_openrouter_api_key() -> Optional[str]:
    """OpenRouter API key, if configured."""
    return os.getenv("OPENROUTER_API_KEY") or None


def get_request_timeout() -> float:
    """
    Request timeout in seconds for provider plugins.

    Raises:
        ValueError: If SSESTREAM_TIMEOUT is not a positive number
    """
    raw = os.getenv("SSESTREAM_TIMEOUT", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"SSESTREAM_TIMEOUT must be a number, got {raw!r}")
    if timeout <= 0:
        raise ValueError("SSESTREAM_TIMEOUT must be positive")
    return timeout


def get_debug_config() -> DebugConfig:
    """
    Parse SSESTREAM_DEBUG.

    - unset / 0 / false -> False
    - 1 / true / all    -> True (every category)
    - "plugin,sse"      -> DebugOptions with those categories on
    """
    raw = os.getenv("SSESTREAM_DEBUG", "").strip().lower()
    if raw in _FALSY:
        return False
    if raw in _TRUTHY or raw == "all":
        return True

    names = {part.strip() for part in raw.split(",") if part.strip()}
    known = {c.value for c in DebugCategory}
    unknown = names - known - {"all"}
    if unknown:
        raise ValueError(
            f"Unknown SSESTREAM_DEBUG categories: {', '.join(sorted(unknown))}"
        )
    return DebugOptions(
        all="all" in names,
        plugin=DebugCategory.PLUGIN.value in names,
        sse=DebugCategory.SSE.value in names,
    )
