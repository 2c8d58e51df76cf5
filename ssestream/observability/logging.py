"""
ssestream - Structured JSON Logging

JSON log records carrying the context of the stream instance that emitted
them (stream_id, plugin, model).

The engine binds a LogContext inside each stream's read task, so trace
records from the engine and from plugin line parsers running in that task
are tagged without passing ids around.

Usage:
    from ssestream.observability.logging import setup_logging, get_logger

    setup_logging(level="DEBUG")

    logger = get_logger(__name__)
    logger.debug("Received chunk", chunk="data: ...")

Output:
    {"timestamp": "2024-01-15T10:30:00+00:00", "level": "DEBUG", "logger": "ssestream.streaming.engine",
     "message": "Received chunk", "stream_id": "sse_ab12cd34ef56", "plugin": "ollama", "chunk": "data: ..."}
"""

import os
import sys
import json
import logging
from typing import Optional, Dict, Any, Union
from datetime import datetime, timezone
from dataclasses import dataclass
from contextvars import ContextVar

_stream_context: ContextVar[Optional["LogContext"]] = ContextVar("stream_log_context", default=None)

# LogRecord attributes that are not extra fields
_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename",
    "funcName", "levelname", "levelno", "lineno",
    "module", "msecs", "pathname", "process",
    "processName", "relativeCreated", "stack_info",
    "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName",
}


@dataclass
class LogContext:
    """Identity of the stream instance a record belongs to. Task-local."""
    stream_id: str = ""
    plugin: str = ""
    model: str = ""

    @classmethod
    def get_current(cls) -> Optional["LogContext"]:
        return _stream_context.get()

    @classmethod
    def set_current(cls, ctx: "LogContext"):
        _stream_context.set(ctx)

    @classmethod
    def clear(cls):
        _stream_context.set(None)

    def to_dict(self) -> Dict[str, Any]:
        """Non-empty fields only."""
        fields = {"stream_id": self.stream_id, "plugin": self.plugin, "model": self.model}
        return {key: value for key, value in fields.items() if value}


class JSONFormatter(logging.Formatter):
    """One JSON object per record: level, logger, message, stream context, extras."""

    # Substrings marking a field as secret
    SENSITIVE_FIELDS = {
        "password", "secret", "token", "api_key", "apikey",
        "authorization", "credential", "private_key",
    }

    def __init__(self, redact_sensitive: bool = True):
        super().__init__()
        self.redact_sensitive = redact_sensitive

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        ctx = LogContext.get_current()
        if ctx:
            log_data.update(ctx.to_dict())

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            if self.redact_sensitive and self._is_sensitive(key):
                value = "[REDACTED]"
            log_data[key] = value

        return json.dumps(log_data, default=str, ensure_ascii=False)

    def _is_sensitive(self, field_name: str) -> bool:
        field_lower = field_name.lower()
        return any(sensitive in field_lower for sensitive in self.SENSITIVE_FIELDS)


class StructuredLogger:
    """
    Thin wrapper over a stdlib logger.

    Keyword arguments become extra fields; the current LogContext is merged in.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, msg: str, **kwargs):
        exc_info = kwargs.pop("exc_info", None)

        extra: Dict[str, Any] = {}
        ctx = LogContext.get_current()
        if ctx:
            extra.update(ctx.to_dict())
        extra.update(kwargs)

        self._logger.log(level, msg, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, **kwargs):
        self._log(logging.DEBUG, msg, **kwargs)

    def warning(self, msg: str, **kwargs):
        self._log(logging.WARNING, msg, **kwargs)

    def exception(self, msg: str, **kwargs):
        """Log at ERROR with the active exception's traceback."""
        kwargs["exc_info"] = True
        self._log(logging.ERROR, msg, **kwargs)


_logging_configured = False


def setup_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = True,
    redact_sensitive: bool = True,
) -> None:
    """
    Configure the "ssestream" package logger with a stderr handler.

    The root logger is left alone so host applications keep their setup.

    Args:
        level: Log level name or number
        json_output: JSONFormatter (True) or a plain text format (False)
        redact_sensitive: Redact fields such as api_key / authorization
    """
    global _logging_configured

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    package_logger = logging.getLogger("ssestream")
    package_logger.setLevel(level)

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_output:
        formatter: logging.Formatter = JSONFormatter(redact_sensitive=redact_sensitive)
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)
    package_logger.addHandler(handler)

    # Keep transport chatter out of stream traces
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    _logging_configured = True


def get_logger(name: str) -> StructuredLogger:
    """
    Structured logger for a module.

    Configures logging from LOG_LEVEL / LOG_FORMAT on first use if
    setup_logging() was not called.
    """
    if not _logging_configured:
        setup_logging(
            level=os.getenv("LOG_LEVEL", "INFO"),
            json_output=os.getenv("LOG_FORMAT", "json").lower() == "json",
        )

    return StructuredLogger(logging.getLogger(name))
