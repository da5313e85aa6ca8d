"""
Public entrypoints for dogsink.

Provides zero-config ``get_sink()`` and ``runtime()`` on top of the explicit
``datadog_sink()`` facade.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from ._version import __version__
from .core.batching import PeriodicBatchingSink, SinkState
from .core.configuration import DatadogConfiguration
from .core.errors import (
    ConfigurationError,
    DogsinkError,
    SinkDisposedError,
    TransportError,
)
from .core.events import LogEvent
from .core.levels import LogEventLevel
from .core.settings import Settings
from .core.tags import extract_tags
from .formatting import DEFAULT_OUTPUT_TEMPLATE, MessageTemplateTextFormatter
from .sink import (
    DEFAULT_BATCH_POSTING_LIMIT,
    DEFAULT_PERIOD,
    DatadogSink,
    datadog_sink,
    sink_from_settings,
)
from .stdlib_bridge import DatadogHandler, enable_stdlib_bridge
from .transport import AlertType, DogStatsdTransport, FormattedRecord, Transport

__all__ = [
    "AlertType",
    "ConfigurationError",
    "DEFAULT_BATCH_POSTING_LIMIT",
    "DEFAULT_OUTPUT_TEMPLATE",
    "DEFAULT_PERIOD",
    "DatadogConfiguration",
    "DatadogHandler",
    "DatadogSink",
    "DogStatsdTransport",
    "DogsinkError",
    "FormattedRecord",
    "LogEvent",
    "LogEventLevel",
    "MessageTemplateTextFormatter",
    "PeriodicBatchingSink",
    "Settings",
    "SinkDisposedError",
    "SinkState",
    "Transport",
    "TransportError",
    "VERSION",
    "__version__",
    "datadog_sink",
    "enable_stdlib_bridge",
    "extract_tags",
    "get_sink",
    "runtime",
]


def get_sink(*, settings: Settings | None = None) -> DatadogSink:
    """Return a started Datadog sink configured from the environment.

    Example:
        ```python
        import logging
        from dogsink import get_sink, enable_stdlib_bridge

        sink = get_sink()
        enable_stdlib_bridge(sink)
        logging.getLogger("app").info("Order {OrderId} shipped", extra={"OrderId": 7})
        sink.dispose()
        ```

    Notes:
    - Reads ``DOGSINK_*`` environment variables (see ``Settings``)
    - The sink is disposed at interpreter exit unless
      ``DOGSINK_CORE__ATEXIT_DISPOSE_ENABLED=false``
    """
    return sink_from_settings(settings)


@contextmanager
def runtime(*, settings: Settings | None = None) -> Iterator[DatadogSink]:
    """Context manager that starts a sink and drains it on exit."""
    from .core.shutdown import unregister_sink

    sink = get_sink(settings=settings)
    try:
        yield sink
    finally:
        sink.dispose()
        unregister_sink(sink)


VERSION = __version__
