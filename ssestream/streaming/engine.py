"""
ssestream - Stream Engine

Turns a provider's raw event stream into clean text.

Lifecycle of one instance:

    Preparing -> Streaming -> Completed | Errored   (or Cancelled by the consumer)

- Preparing: the plugin opens the upstream stream. Failure fires on_error
  with empty content and returns an already-closed outbound stream.
- Streaming: a background task reads chunks, decodes them (multi-byte
  characters may straddle chunks), splits frames on the plugin's delimiter,
  sniffs in-band error objects, parses lines and emits text.
- Exactly one terminal callback fires: on_done or on_error. A cancelled
  instance fires neither.

Usage:
    stream = await create_sse_stream(
        SSEEngineParams(
            user_message="Hi",
            plugin=OllamaPlugin(),
            handlers=SSEEngineHandlers(on_partial=print_partial),
        )
    )
    text = (await stream.aread()).decode("utf-8")
"""

import asyncio
import codecs
import inspect
import time
import uuid
from typing import Any, Optional

from .errors import detect_error_payload
from .framing import parse_frame, split_frames
from .outbound import SSEOutboundStream
from .reader import ByteReader
from ..core.debug import DebugCategory, DebugOptions
from ..core.errors import PayloadError
from ..core.models import Role, SSEEngineParams, SSEMessage
from ..observability.logging import LogContext, get_logger
from ..observability.metrics import MetricsCollector, StreamOutcome, get_metrics
from ..plugins.base import DEFAULT_DELIMITER

logger = get_logger(__name__)


async def _call_handler(handler, *args: Any):
    """Invoke an optional handler; await it if it is a coroutine function."""
    if handler is None:
        return
    result = handler(*args)
    if inspect.isawaitable(result):
        await result


class SSEStreamEngine:
    """
    Per-call engine state. One instance per create_sse_stream() call;
    nothing here is shared between instances.
    """

    def __init__(
        self,
        params: SSEEngineParams,
        metrics: Optional[MetricsCollector] = None
    ):
        self.params = params
        self.plugin = params.plugin
        self.handlers = params.handlers
        # Normalized in start() so a bad value is reported via on_error
        self.debug = DebugOptions()
        self.metrics = metrics or get_metrics()

        self.stream_id = f"sse_{uuid.uuid4().hex[:12]}"
        self.plugin_name = getattr(self.plugin, "name", type(self.plugin).__name__)
        self.delimiter = getattr(self.plugin, "delimiter", None) or DEFAULT_DELIMITER

        # Mutable stream state
        self.buffer = ""
        self.full_response = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._terminated = False
        self._first_partial_at: Optional[float] = None
        self._started_at = time.monotonic()

        self.reader: Optional[ByteReader] = None
        self.outbound = SSEOutboundStream(on_cancel=self.cancel)
        self._task: Optional["asyncio.Task[None]"] = None

    # ============================================================
    # Public API
    # ============================================================

    async def start(self) -> SSEOutboundStream:
        """Prepare the upstream request and start the read loop."""
        # 1) Preparing
        try:
            self.debug = DebugOptions.normalize(self.params.debug)
            self._trace(
                "Starting SSE stream",
                system_message=self.params.system_message,
                user_message=self.params.user_message,
                options=self.params.options,
            )
            source = await self.plugin.prepare_request(self.params)
            self.reader = ByteReader(source)
        except Exception as e:
            self._terminated = True
            self._trace("Plugin failed before streaming", error=repr(e))
            self._record(StreamOutcome.PREPARE_FAILED)
            await self._notify_error(e, SSEMessage.assistant(""))
            return SSEOutboundStream.closed()

        self._trace("Request prepared successfully")

        # 2) Echo system/user messages before any byte is read
        try:
            if self.params.system_message:
                await _call_handler(
                    self.handlers.on_system_message,
                    SSEMessage(role=Role.SYSTEM, content=self.params.system_message),
                )
            await _call_handler(
                self.handlers.on_user_message,
                SSEMessage(role=Role.USER, content=self.params.user_message),
            )
        except Exception as e:
            self._terminated = True
            await self._release_reader()
            self._record(StreamOutcome.ERRORED)
            self.outbound.error(e)
            await self._notify_error(e, SSEMessage.assistant(""))
            return self.outbound

        # 3) Streaming
        self._task = asyncio.create_task(self._run(), name=self.stream_id)
        return self.outbound

    async def cancel(self):
        """Stop the read loop, release the upstream reader, fire no handlers."""
        if not self._terminated:
            self._terminated = True
            self._trace("Stream cancelled by consumer")
            self._record(StreamOutcome.CANCELLED)

        if self._task is not None and not self._task.done():
            self._task.cancel()
            if self._task is asyncio.current_task():
                # Cancelled from inside a handler; the loop's finally releases
                return
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        await self._release_reader()

    # ============================================================
    # Read loop
    # ============================================================

    async def _run(self):
        # Task-local: plugin parsers logging from here carry the stream id
        LogContext.set_current(
            LogContext(stream_id=self.stream_id, plugin=self.plugin_name, model=self._model)
        )

        with self.metrics.track_active_stream(self.plugin_name):
            try:
                await self._read_loop()
            except asyncio.CancelledError:
                if not self._terminated:
                    self._terminated = True
                    self._record(StreamOutcome.CANCELLED)
                raise
            except Exception as e:
                await self._fail(e)
            finally:
                await self._release_reader()
                LogContext.clear()

    async def _read_loop(self):
        self._trace("Beginning to read from upstream")

        while True:
            chunk = await self.reader.read()
            if chunk is None:
                self._trace("Reader returned end of input")
                break

            text = self._decoder.decode(chunk)
            self.buffer += text
            frames, self.buffer = split_frames(self.buffer, self.delimiter)

            self._trace("Received chunk", chunk=text, frames=frames)

            for frame in frames:
                if await self._process_frame(frame):
                    return

        # Leftover: whatever is still buffered is the last frame
        self.buffer += self._decoder.decode(b"", final=True)
        leftover, self.buffer = self.buffer, ""
        if leftover.strip():
            self._trace("Handling leftover buffer", leftover=leftover)
            if await self._process_frame(leftover):
                return

        await self._complete()

    async def _process_frame(self, frame: str) -> bool:
        """
        Handle one complete frame.

        Returns:
            True if the instance terminated (DONE seen)

        Raises:
            PayloadError: If the frame is an in-band error object
        """
        if self._terminated:
            # Cancelled from a handler earlier in this chunk
            return True

        trimmed = frame.strip()
        if not trimmed:
            return False

        payload = detect_error_payload(trimmed)
        if payload is not None:
            raise PayloadError(
                payload.message,
                partial_content=self.full_response,
                provider=self.plugin_name,
                code=payload.code,
                error_type=payload.type,
            )

        result = parse_frame(trimmed, self.plugin.parse_server_sent_event)
        if result.done:
            self._trace("Received DONE event, closing stream")
            await self._complete()
            return True

        if result.text:
            await self._emit_partial(result.text)
        return False

    # ============================================================
    # Emission
    # ============================================================

    async def _emit_partial(self, text: str):
        data = text.encode("utf-8")

        self.full_response += text
        self.outbound.enqueue(data)

        if self._first_partial_at is None:
            self._first_partial_at = time.monotonic()
            self.metrics.record_time_to_first_partial(
                self.plugin_name, self._first_partial_at - self._started_at
            )
        self.metrics.record_partial(self.plugin_name, len(data))

        self._trace("Emitted partial text", text=text)
        await _call_handler(self.handlers.on_partial, SSEMessage.assistant(text))

    async def _complete(self):
        if self._terminated:
            return
        self._terminated = True

        self.outbound.close()
        self._record(StreamOutcome.COMPLETED)
        self._trace("Streaming complete", response_length=len(self.full_response))

        try:
            await _call_handler(self.handlers.on_done, SSEMessage.assistant(self.full_response))
        except Exception:
            logger.exception("on_done handler raised")

    async def _fail(self, error: Exception):
        if self._terminated:
            # Terminal callback already fired (e.g. on_done raised); only log
            logger.exception("Error after stream termination", error=repr(error))
            return
        self._terminated = True

        self.outbound.error(error)
        self._record(StreamOutcome.ERRORED)
        self._trace("Caught error in read loop", error=repr(error))

        await self._notify_error(error, SSEMessage.assistant(self.full_response))

    async def _notify_error(self, error: Exception, partial: SSEMessage):
        try:
            await _call_handler(self.handlers.on_error, error, partial)
        except Exception:
            logger.exception("on_error handler raised")

    # ============================================================
    # Helpers
    # ============================================================

    async def _release_reader(self):
        if self.reader is None:
            return
        try:
            await self.reader.release()
        except Exception:
            logger.warning("Failed to release upstream reader", exc_info=True)

    def _record(self, outcome: StreamOutcome):
        self.metrics.record_stream(
            self.plugin_name,
            outcome,
            duration_seconds=time.monotonic() - self._started_at,
        )

    @property
    def _model(self) -> str:
        options = self.params.options or {}
        return str(options.get("model") or "")

    def _trace(self, msg: str, **fields: Any):
        if self.debug.is_enabled(DebugCategory.SSE):
            logger.debug(msg, stream_id=self.stream_id, plugin=self.plugin_name, **fields)


async def create_sse_stream(
    params: SSEEngineParams,
    *,
    metrics: Optional[MetricsCollector] = None
) -> SSEOutboundStream:
    """
    Start a stream instance.

    Never raises for provider or stream failures: those are reported via
    handlers.on_error and the returned stream's state.

    Args:
        params: Messages, plugin, options, handlers and debug configuration
        metrics: Collector to record into (defaults to the process-wide one)

    Returns:
        Outbound stream of UTF-8 encoded text increments
    """
    engine = SSEStreamEngine(params, metrics=metrics)
    return await engine.start()
