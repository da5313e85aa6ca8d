"""
Log event value type.

A ``LogEvent`` is produced by the application (or the stdlib bridge) and is
never mutated afterwards: the batching core may hold the same instance in its
buffer while producer threads keep running.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from . import templates
from .levels import LogEventLevel, parse_level


@dataclass(frozen=True)
class LogEvent:
    """Immutable structured log event."""

    timestamp: datetime
    level: LogEventLevel
    message_template: str
    properties: Mapping[str, Any] = field(default_factory=dict)
    exception: BaseException | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, datetime):
            raise ValueError("Timestamp must be a datetime object")
        if not isinstance(self.message_template, str):
            raise ValueError("Message template must be a string")
        # Naive timestamps are taken as local time
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.astimezone())
        object.__setattr__(self, "level", parse_level(self.level))
        # Read-only copy so callers cannot mutate a buffered event
        object.__setattr__(
            self, "properties", MappingProxyType(dict(self.properties))
        )

    @classmethod
    def create(
        cls,
        level: LogEventLevel | str | int,
        message_template: str,
        *,
        exception: BaseException | None = None,
        timestamp: datetime | None = None,
        properties: Mapping[str, Any] | None = None,
        **extra: Any,
    ) -> LogEvent:
        """Build an event stamped with the current UTC time.

        Keyword arguments not named above become event properties.
        """
        props: dict[str, Any] = dict(properties or {})
        props.update(extra)
        return cls(
            timestamp=timestamp or datetime.now(timezone.utc),
            level=parse_level(level),
            message_template=message_template,
            properties=props,
            exception=exception,
        )

    def render_message(self) -> str:
        return templates.render(self.message_template, self.properties)
