"""
ssestream - Observability Module

- Prometheus metrics (Counter, Histogram, Gauge)
- Structured JSON logging with stream context injection

Usage:
    from ssestream.observability import get_logger, get_metrics

    logger = get_logger(__name__)
    metrics = get_metrics()
"""

from .metrics import (
    MetricsCollector,
    StreamOutcome,
    get_metrics,
    setup_metrics,
    metrics_text,
)
from .logging import (
    JSONFormatter,
    StructuredLogger,
    get_logger,
    setup_logging,
    LogContext,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "StreamOutcome",
    "get_metrics",
    "setup_metrics",
    "metrics_text",
    # Logging
    "JSONFormatter",
    "StructuredLogger",
    "get_logger",
    "setup_logging",
    "LogContext",
]
