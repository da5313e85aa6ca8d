"""
Tag extraction for Datadog events.

Tags are ``key:value`` strings the collector uses for filtering and search.
Every record carries the configured base tags followed by tags derived from
the event itself.
"""

from __future__ import annotations

from collections.abc import Iterable

from .events import LogEvent
from .templates import render_value


def render_exception(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


def extract_tags(event: LogEvent, base_tags: Iterable[str] = ()) -> list[str]:
    """Return base tags plus the tags derived from ``event``.

    Order: base tags, ``LogLevel``, ``LogMessageTemplate``, ``LogTimeStamp``,
    ``Exception`` (only when present), then one tag per non-null property in
    the event's property order. ``base_tags`` is never modified.
    """
    tags = list(base_tags)
    tags.append(f"LogLevel:{event.level}")
    tags.append(f"LogMessageTemplate:{event.message_template}")
    tags.append(f"LogTimeStamp:{event.timestamp.isoformat()}")
    if event.exception is not None:
        tags.append(f"Exception:{render_exception(event.exception)}")
    for name, value in event.properties.items():
        if value is None:
            continue
        tags.append(f"{name}:{render_value(value)}")
    return tags
