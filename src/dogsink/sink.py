"""
Datadog sink and its public facade.

``DatadogSink`` turns each batch of ``LogEvent`` values into DogStatsD events
and hands the whole batch to a ``Transport`` in one call. ``datadog_sink()``
is the entry point applications use; it applies the documented defaults so
callers can override only what they need.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta
from typing import Any

from .core import diagnostics
from .core.batching import (
    DEFAULT_BATCH_POSTING_LIMIT,
    DEFAULT_DISPOSE_TIMEOUT,
    DEFAULT_PERIOD,
    PeriodicBatchingSink,
)
from .core.configuration import DatadogConfiguration
from .core.errors import ConfigurationError, ErrorCategory
from .core.events import LogEvent
from .core.levels import LogEventLevel, parse_level
from .core.tags import extract_tags
from .formatting import (
    DEFAULT_OUTPUT_TEMPLATE,
    MessageTemplateTextFormatter,
    TextFormatter,
)
from .metrics.metrics import MetricsCollector
from .transport import (
    DEFAULT_MAX_PACKET_SIZE,
    AlertType,
    DogStatsdTransport,
    FormattedRecord,
    Transport,
)

TITLE_PREFIX = "Log Event - "


def alert_type_for(level: LogEventLevel) -> AlertType:
    """Map a log level onto a Datadog alert type."""
    if level >= LogEventLevel.ERROR:
        return AlertType.ERROR
    if level is LogEventLevel.WARNING:
        return AlertType.WARNING
    return AlertType.INFO


class DatadogSink(PeriodicBatchingSink):
    """Batching sink that writes log events to a DogStatsD agent."""

    name = "datadog"

    def __init__(
        self,
        configuration: DatadogConfiguration,
        batch_size_limit: int = DEFAULT_BATCH_POSTING_LIMIT,
        period: float | timedelta = DEFAULT_PERIOD,
        text_formatter: TextFormatter | None = None,
        *,
        transport: Transport | None = None,
        minimum_level: LogEventLevel | str = LogEventLevel.VERBOSE,
        metrics: MetricsCollector | None = None,
        dispose_timeout: float | timedelta = DEFAULT_DISPOSE_TIMEOUT,
        max_packet_size: int = DEFAULT_MAX_PACKET_SIZE,
    ) -> None:
        if configuration is None:
            raise ConfigurationError("configuration is required")
        super().__init__(
            batch_size_limit,
            period,
            dispose_timeout=dispose_timeout,
            metrics=metrics,
        )
        try:
            self._minimum_level = parse_level(minimum_level)
        except ValueError as exc:
            raise ConfigurationError("Invalid minimum level", cause=exc) from exc
        self._configuration = configuration
        self._text_formatter: TextFormatter = (
            text_formatter or MessageTemplateTextFormatter()
        )
        self._transport: Transport = transport or DogStatsdTransport(
            configuration.statsd_server,
            configuration.statsd_port,
            max_packet_size=max_packet_size,
        )

    @property
    def configuration(self) -> DatadogConfiguration:
        return self._configuration

    @property
    def minimum_level(self) -> LogEventLevel:
        return self._minimum_level

    def emit(self, event: LogEvent) -> None:
        if event.level < self._minimum_level:
            return
        super().emit(event)

    def format_record(self, event: LogEvent) -> FormattedRecord:
        """Build the record sent for one event."""
        cfg = self._configuration
        title = f"{TITLE_PREFIX}{event.level}"
        if cfg.prefix:
            title = f"{cfg.prefix}.{title}"
        return FormattedRecord(
            title=title,
            text=self._text_formatter.format(event),
            alert_type=alert_type_for(event.level),
            hostname=cfg.hostname,
            tags=tuple(extract_tags(event, cfg.tags)),
        )

    async def emit_batch(self, events: Sequence[LogEvent]) -> int:
        records: list[FormattedRecord] = []
        skipped = 0
        for event in events:
            try:
                records.append(self.format_record(event))
            except Exception as exc:
                skipped += 1
                diagnostics.warn(
                    "sink",
                    "event formatting failed; event skipped",
                    sink=self.name,
                    level=str(event.level),
                    template=event.message_template,
                    error_type=type(exc).__name__,
                    error=str(exc),
                    category=ErrorCategory.FORMATTING.value,
                    _rate_limit_key="format-failed",
                )
        if records:
            # A failed send drops the whole batch, skipped events included
            await self._transport.send(records)
        if skipped:
            self._record_dropped(skipped)
            if self._metrics is not None:
                try:
                    await self._metrics.record_events_dropped(skipped, reason="format")
                except Exception:
                    pass
        return len(records)

    async def release(self) -> None:
        await self._transport.close()


def datadog_sink(
    configuration: DatadogConfiguration,
    *,
    output_template: str = DEFAULT_OUTPUT_TEMPLATE,
    restricted_to_minimum_level: LogEventLevel | str = LogEventLevel.VERBOSE,
    batch_posting_limit: int = DEFAULT_BATCH_POSTING_LIMIT,
    period: float | timedelta | None = None,
    text_formatter: TextFormatter | None = None,
    transport: Transport | None = None,
    metrics: MetricsCollector | None = None,
    dispose_timeout: float | timedelta = DEFAULT_DISPOSE_TIMEOUT,
    start: bool = True,
) -> DatadogSink:
    """Create a Datadog sink with default batching settings.

    Args:
        configuration: Connection details for the DogStatsD agent
        output_template: Template for the event body, ignored when
            ``text_formatter`` is given
        restricted_to_minimum_level: Events below this level are discarded
        batch_posting_limit: Maximum number of events per batch
        period: Seconds between flushes; defaults to 30
        text_formatter: Custom formatter for the event body
        transport: Custom transport; defaults to a UDP DogStatsD client
        metrics: Optional metrics collector
        dispose_timeout: Upper bound on the final flush during dispose
        start: Start the background flush loop before returning

    Raises:
        ConfigurationError: If a required parameter is missing or invalid
    """
    if configuration is None:
        raise ConfigurationError("configuration is required")
    formatter = text_formatter or MessageTemplateTextFormatter(output_template)
    sink = DatadogSink(
        configuration,
        batch_posting_limit,
        DEFAULT_PERIOD if period is None else period,
        formatter,
        transport=transport,
        minimum_level=restricted_to_minimum_level,
        metrics=metrics,
        dispose_timeout=dispose_timeout,
    )
    if start:
        sink.start()
    return sink


def sink_from_settings(settings: Any | None = None, **overrides: Any) -> DatadogSink:
    """Build and start a sink from environment-driven ``Settings``."""
    from .core.settings import Settings
    from .core.shutdown import register_sink

    cfg = settings or Settings()
    metrics = MetricsCollector(enabled=cfg.core.enable_metrics)
    sink = DatadogSink(
        cfg.to_configuration(),
        cfg.sink.batch_posting_limit,
        cfg.sink.period_seconds,
        MessageTemplateTextFormatter(cfg.sink.output_template),
        minimum_level=cfg.sink.minimum_level,
        metrics=metrics,
        dispose_timeout=cfg.sink.dispose_timeout_seconds,
        max_packet_size=cfg.datadog.max_packet_size,
        **overrides,
    )
    sink.start()
    if cfg.core.atexit_dispose_enabled:
        register_sink(sink)
    return sink


__all__ = [
    "DEFAULT_BATCH_POSTING_LIMIT",
    "DEFAULT_OUTPUT_TEMPLATE",
    "DEFAULT_PERIOD",
    "DatadogSink",
    "alert_type_for",
    "datadog_sink",
    "sink_from_settings",
]
