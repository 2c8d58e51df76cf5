"""
ssestream - Pytest Configuration

Configures:
- Integration test markers (skip by default)
- Recording handlers and scripted plugins for engine tests
- Fresh Prometheus registries for metrics assertions
"""

import json
import os
import pytest
from typing import Any, AsyncIterator, List, Optional, Sequence, Tuple

from prometheus_client import CollectorRegistry

from ssestream.core.models import SSEEngineHandlers, SSEEngineParams, SSEMessage
from ssestream.observability.metrics import MetricsCollector
from ssestream.plugins.base import DONE, ProviderPlugin


# ============================================================
# Environment Configuration
# ============================================================

def _is_truthy(value: Optional[str]) -> bool:
    """Check if environment variable is truthy."""
    if value is None:
        return False
    return value.lower() in ("1", "true", "yes", "on")


RUN_INTEGRATION = _is_truthy(os.getenv("RUN_INTEGRATION"))


# ============================================================
# Pytest Markers
# ============================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires RUN_INTEGRATION=1)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless RUN_INTEGRATION=1."""
    skip_integration = pytest.mark.skip(
        reason="Integration test - set RUN_INTEGRATION=1 to run"
    )

    for item in items:
        if "integration" in item.keywords and not RUN_INTEGRATION:
            item.add_marker(skip_integration)


# ============================================================
# Handlers
# ============================================================

class RecordingHandlers:
    """Collects every handler call in order."""

    def __init__(self):
        self.events: List[Tuple[str, Any]] = []
        self.system: List[SSEMessage] = []
        self.user: List[SSEMessage] = []
        self.partials: List[str] = []
        self.done: List[SSEMessage] = []
        self.errors: List[Tuple[Exception, SSEMessage]] = []

    def on_system_message(self, message: SSEMessage):
        self.events.append(("system", message.content))
        self.system.append(message)

    def on_user_message(self, message: SSEMessage):
        self.events.append(("user", message.content))
        self.user.append(message)

    def on_partial(self, message: SSEMessage):
        self.events.append(("partial", message.content))
        self.partials.append(message.content)

    def on_done(self, message: SSEMessage):
        self.events.append(("done", message.content))
        self.done.append(message)

    def on_error(self, error: Exception, partial: SSEMessage):
        self.events.append(("error", str(error)))
        self.errors.append((error, partial))

    @property
    def terminal_events(self) -> List[str]:
        return [name for name, _ in self.events if name in ("done", "error")]

    def as_handlers(self) -> SSEEngineHandlers:
        return SSEEngineHandlers(
            on_system_message=self.on_system_message,
            on_user_message=self.on_user_message,
            on_partial=self.on_partial,
            on_done=self.on_done,
            on_error=self.on_error,
        )


@pytest.fixture
def recorder() -> RecordingHandlers:
    return RecordingHandlers()


# ============================================================
# Plugins
# ============================================================

class ScriptedPlugin(ProviderPlugin):
    """
    Plugin that replays fixed byte chunks.

    Lines look like `data: "json string"`; `data: [DONE]` ends the stream.
    """

    name = "scripted"

    def __init__(
        self,
        chunks: Sequence[bytes] = (),
        delimiter: Optional[str] = "\n\n",
        fail_after: Optional[int] = None,
        prepare_error: Optional[Exception] = None,
    ):
        self.chunks = list(chunks)
        self.delimiter = delimiter
        self.fail_after = fail_after
        self.prepare_error = prepare_error
        self.chunks_read = 0
        self.closed = False
        self.parsed_lines: List[str] = []

    async def _generate(self) -> AsyncIterator[bytes]:
        try:
            for index, chunk in enumerate(self.chunks):
                if self.fail_after is not None and index >= self.fail_after:
                    raise ConnectionResetError("upstream connection reset")
                self.chunks_read += 1
                yield chunk
            if self.fail_after is not None and self.fail_after >= len(self.chunks):
                raise ConnectionResetError("upstream connection reset")
        finally:
            self.closed = True

    async def prepare_request(self, params: SSEEngineParams):
        if self.prepare_error is not None:
            raise self.prepare_error
        return self._generate()

    def parse_server_sent_event(self, line: str) -> Optional[str]:
        self.parsed_lines.append(line)
        if not line.startswith("data:"):
            return None
        payload = line[len("data:"):].strip()
        if payload == DONE:
            return DONE
        try:
            value = json.loads(payload)
        except json.JSONDecodeError:
            return None
        return value if isinstance(value, str) else None


@pytest.fixture
def scripted_plugin():
    """Factory for ScriptedPlugin instances."""
    return ScriptedPlugin


# ============================================================
# Metrics
# ============================================================

@pytest.fixture
def metrics() -> MetricsCollector:
    """Metrics collector bound to a fresh registry."""
    return MetricsCollector(registry=CollectorRegistry())
