"""
Bridge from the standard-library ``logging`` module.

``DatadogHandler`` converts ``logging.LogRecord`` objects into ``LogEvent``
values and hands them to a sink. ``extra`` fields become event properties,
so message templates work with plain stdlib calls::

    log.info("Order {OrderId} shipped", extra={"OrderId": 42})

Records from ``dogsink`` loggers are ignored to avoid feedback loops.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from .core.events import LogEvent
from .core.levels import from_stdlib_level

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }
)


class _EventSink(Protocol):
    def emit(self, event: LogEvent) -> None: ...

    def dispose(self) -> None: ...


def _escape_braces(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


def record_to_event(record: logging.LogRecord) -> LogEvent:
    """Convert a stdlib log record into a LogEvent."""
    if record.args:
        # Already %-formatted; keep it literal
        template = _escape_braces(record.getMessage())
    else:
        template = str(record.msg)
    properties: dict[str, Any] = {"SourceContext": record.name}
    for key, value in record.__dict__.items():
        if key in _STANDARD_ATTRS or key.startswith("_"):
            continue
        properties[key] = value
    exception = None
    if record.exc_info and record.exc_info[1] is not None:
        exception = record.exc_info[1]
    return LogEvent(
        timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
        level=from_stdlib_level(record.levelno),
        message_template=template,
        properties=properties,
        exception=exception,
    )


class DatadogHandler(logging.Handler):
    """``logging.Handler`` that forwards records to a batching sink."""

    def __init__(
        self,
        sink: _EventSink,
        level: int = logging.NOTSET,
        *,
        owns_sink: bool = False,
    ) -> None:
        super().__init__(level)
        self._sink = sink
        self._owns_sink = owns_sink

    @property
    def sink(self) -> _EventSink:
        return self._sink

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == "dogsink" or record.name.startswith("dogsink."):
            return
        try:
            self._sink.emit(record_to_event(record))
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            if self._owns_sink:
                self._sink.dispose()
        finally:
            super().close()


def enable_stdlib_bridge(
    sink: _EventSink,
    *,
    level: int = logging.INFO,
    logger: logging.Logger | None = None,
    remove_existing_handlers: bool = False,
    owns_sink: bool = False,
) -> DatadogHandler:
    """Attach a ``DatadogHandler`` to ``logger`` (the root logger by default)."""
    target = logger or logging.getLogger()
    if remove_existing_handlers:
        for handler in list(target.handlers):
            target.removeHandler(handler)
    handler = DatadogHandler(sink, level=level, owns_sink=owns_sink)
    target.addHandler(handler)
    if target.level == logging.NOTSET or target.level > level:
        target.setLevel(level)
    return handler
