"""
ssestream - Debug Gate

Decides whether a diagnostic category is switched on.

The debug configuration accepted by the engine is a union:
- a plain boolean (True = every category on)
- a mapping / DebugOptions with an `all` override and per-category flags

It is normalized once at entry into a DebugOptions value. The gate only
selects which trace records get logged; it never changes control flow.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union


class DebugCategory(str, Enum):
    """Diagnostic categories."""
    PLUGIN = "plugin"  # Request preparation inside provider plugins
    SSE = "sse"        # Engine read loop / framing / emission


@dataclass(frozen=True)
class DebugOptions:
    """Structured debug configuration. `all` overrides the other flags."""
    all: bool = False
    plugin: bool = False
    sse: bool = False

    @classmethod
    def normalize(cls, config: "DebugConfig") -> "DebugOptions":
        """Convert any accepted debug configuration into DebugOptions."""
        if config is None or config is False:
            return cls()
        if config is True:
            return cls(all=True)
        if isinstance(config, DebugOptions):
            return config
        if isinstance(config, Mapping):
            return cls(
                all=bool(config.get("all", False)),
                plugin=bool(config.get("plugin", False)),
                sse=bool(config.get("sse", False)),
            )
        raise TypeError(f"Unsupported debug configuration: {config!r}")

    def is_enabled(self, category: Union[DebugCategory, str]) -> bool:
        """Check a single category."""
        if self.all:
            return True
        name = category.value if isinstance(category, DebugCategory) else category
        if name not in {c.value for c in DebugCategory}:
            return False
        return bool(getattr(self, name))


DebugConfig = Optional[Union[bool, DebugOptions, Mapping[str, bool]]]


def is_debug_enabled(
    config: DebugConfig,
    category: Union[DebugCategory, str]
) -> bool:
    """
    Check whether a debug category is active.

    Args:
        config: None/False (off), True (everything on), or structured flags
        category: Category name, e.g. "plugin" or "sse"

    Returns:
        True if diagnostics for the category should be emitted
    """
    if not config:
        return False
    if config is True:
        return True
    return DebugOptions.normalize(config).is_enabled(category)
