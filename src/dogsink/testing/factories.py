"""
Factories for building log events in tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from ..core.events import LogEvent
from ..core.levels import LogEventLevel

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def create_log_event(
    message_template: str = "Test message {Index}",
    *,
    level: LogEventLevel | str = LogEventLevel.INFORMATION,
    exception: BaseException | None = None,
    timestamp: datetime | None = None,
    **properties: Any,
) -> LogEvent:
    """Create a single event with sensible defaults."""
    return LogEvent.create(
        level,
        message_template,
        exception=exception,
        timestamp=timestamp or _EPOCH,
        properties=properties,
    )


def create_batch_events(
    count: int,
    *,
    level: LogEventLevel | str = LogEventLevel.INFORMATION,
    **properties: Any,
) -> list[LogEvent]:
    """Create ``count`` events numbered by an ``Index`` property."""
    return [
        create_log_event(
            level=level,
            timestamp=_EPOCH + timedelta(milliseconds=i),
            Index=i,
            **properties,
        )
        for i in range(count)
    ]
