"""
ssestream - Prometheus Metrics

Metrics exposed:
- ssestream_streams_total: Counter of finished stream instances by plugin and outcome
- ssestream_stream_duration_seconds: Histogram of stream lifetime
- ssestream_time_to_first_partial_seconds: Histogram of latency to the first text increment
- ssestream_partials_total: Counter of emitted text increments
- ssestream_output_bytes_total: Counter of UTF-8 bytes written to outbound streams
- ssestream_active_streams: Gauge of streams currently reading upstream

Usage:
    from ssestream.observability.metrics import get_metrics, metrics_text

    metrics = get_metrics()
    metrics.record_stream(plugin="ollama", outcome=StreamOutcome.COMPLETED, duration_seconds=1.2)

    print(metrics_text())
"""

from enum import Enum
from typing import Optional

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    CollectorRegistry,
    generate_latest,
    REGISTRY,
)


class StreamOutcome(str, Enum):
    """How a stream instance ended."""
    COMPLETED = "completed"
    ERRORED = "errored"
    PREPARE_FAILED = "prepare_failed"
    CANCELLED = "cancelled"


class MetricsCollector:
    """
    Central metrics collector using Prometheus client.

    One collector per registry; use get_metrics() for the process-wide one.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        """Initialize metrics collectors."""
        self.registry = registry

        self.streams_total = Counter(
            "ssestream_streams_total",
            "Total number of finished stream instances",
            labelnames=["plugin", "outcome"],
            registry=registry,
        )

        # Generation streams range from sub-second to minutes
        self.stream_duration = Histogram(
            "ssestream_stream_duration_seconds",
            "Stream instance lifetime in seconds",
            labelnames=["plugin", "outcome"],
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 25.0, 50.0, 100.0, float("inf")),
            registry=registry,
        )

        self.time_to_first_partial = Histogram(
            "ssestream_time_to_first_partial_seconds",
            "Time from stream start to the first text increment",
            labelnames=["plugin"],
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, float("inf")),
            registry=registry,
        )

        self.partials_total = Counter(
            "ssestream_partials_total",
            "Total text increments emitted",
            labelnames=["plugin"],
            registry=registry,
        )

        self.output_bytes_total = Counter(
            "ssestream_output_bytes_total",
            "Total UTF-8 bytes written to outbound streams",
            labelnames=["plugin"],
            registry=registry,
        )

        self.active_streams = Gauge(
            "ssestream_active_streams",
            "Number of stream instances currently reading upstream",
            labelnames=["plugin"],
            registry=registry,
        )

    def record_stream(
        self,
        plugin: str,
        outcome: StreamOutcome,
        duration_seconds: Optional[float] = None,
    ):
        """Record a finished stream instance."""
        self.streams_total.labels(plugin=plugin, outcome=outcome.value).inc()

        if duration_seconds is not None:
            self.stream_duration.labels(
                plugin=plugin,
                outcome=outcome.value,
            ).observe(duration_seconds)

    def record_partial(self, plugin: str, size_bytes: int):
        """Record one emitted text increment."""
        self.partials_total.labels(plugin=plugin).inc()
        self.output_bytes_total.labels(plugin=plugin).inc(size_bytes)

    def record_time_to_first_partial(self, plugin: str, seconds: float):
        """Record latency until the first text increment."""
        self.time_to_first_partial.labels(plugin=plugin).observe(seconds)

    def track_active_stream(self, plugin: str) -> "ActiveStreamTracker":
        """Context manager to track active streams."""
        return ActiveStreamTracker(self, plugin)


class ActiveStreamTracker:
    """Context manager for tracking active streams."""

    def __init__(self, collector: MetricsCollector, plugin: str):
        self.collector = collector
        self.plugin = plugin

    def __enter__(self):
        self.collector.active_streams.labels(plugin=self.plugin).inc()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.collector.active_streams.labels(plugin=self.plugin).dec()


# Module-level functions for convenience
_metrics_instance: Optional[MetricsCollector] = None


def setup_metrics(registry: CollectorRegistry = REGISTRY) -> MetricsCollector:
    """
    Setup metrics collection.

    Safe to call multiple times - returns existing instance for the same registry.
    """
    global _metrics_instance

    if _metrics_instance is not None and _metrics_instance.registry is registry:
        return _metrics_instance

    _metrics_instance = MetricsCollector(registry)
    return _metrics_instance


def get_metrics() -> MetricsCollector:
    """Get the process-wide metrics collector, creating it on first use."""
    if _metrics_instance is None:
        return setup_metrics()
    return _metrics_instance


def metrics_text(registry: Optional[CollectorRegistry] = None) -> bytes:
    """Render metrics in the Prometheus exposition format."""
    if registry is None:
        registry = get_metrics().registry
    return generate_latest(registry)
