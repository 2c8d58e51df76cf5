"""
ssestream Plugins Module

Provider plugins that translate between a provider's streaming API and
the engine's three-capability contract (delimiter, request preparation,
line parsing).
"""

from typing import Optional

from .base import (
    DONE,
    DEFAULT_DELIMITER,
    ByteSource,
    PluginConfig,
    ProviderPlugin,
    HTTPProviderPlugin,
)
from .ollama import OllamaPlugin
from .openrouter import OpenRouterPlugin
from .openrouter_structured import OpenRouterStructuredPlugin

__all__ = [
    "DONE",
    "DEFAULT_DELIMITER",
    "ByteSource",
    "PluginConfig",
    "ProviderPlugin",
    "HTTPProviderPlugin",
    "OllamaPlugin",
    "OpenRouterPlugin",
    "OpenRouterStructuredPlugin",
    "get_plugin",
]


def get_plugin(provider: str, config: Optional[PluginConfig] = None) -> ProviderPlugin:
    """
    Factory function to get the plugin for a provider.

    Args:
        provider: Provider name ("ollama", "openrouter", "openrouter-structured")
        config: Plugin configuration (API key, base URL, timeout)

    Returns:
        Configured plugin instance

    Raises:
        ValueError: If provider is not supported
    """
    plugins = {
        "ollama": OllamaPlugin,
        "openrouter": OpenRouterPlugin,
        "openrouter-structured": OpenRouterStructuredPlugin,
    }

    plugin_class = plugins.get(provider.lower())
    if not plugin_class:
        raise ValueError(f"Unsupported provider: {provider}")

    return plugin_class(config)
