"""Log event levels.

Levels are ordered from most to least verbose:
Verbose < Debug < Information < Warning < Error < Fatal.

The display name of a level (``str(level)``) is what ends up in event titles
and tags, e.g. ``"Log Event - Information"``.

Example:
    >>> parse_level("warn")
    <LogEventLevel.WARNING: 3>
    >>> str(LogEventLevel.INFORMATION)
    'Information'
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Final


class LogEventLevel(IntEnum):
    VERBOSE = 0
    DEBUG = 1
    INFORMATION = 2
    WARNING = 3
    ERROR = 4
    FATAL = 5

    def __str__(self) -> str:
        return self.name.capitalize()

    # IntEnum formats as int on 3.11+; f-strings must show the name
    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


_ALIASES: Final[dict[str, LogEventLevel]] = {
    "VERBOSE": LogEventLevel.VERBOSE,
    "TRACE": LogEventLevel.VERBOSE,
    "DEBUG": LogEventLevel.DEBUG,
    "INFORMATION": LogEventLevel.INFORMATION,
    "INFO": LogEventLevel.INFORMATION,
    "WARNING": LogEventLevel.WARNING,
    "WARN": LogEventLevel.WARNING,  # alias
    "ERROR": LogEventLevel.ERROR,
    "ERR": LogEventLevel.ERROR,  # alias
    "FATAL": LogEventLevel.FATAL,
    "CRITICAL": LogEventLevel.FATAL,  # alias
}


def parse_level(level: str | int | LogEventLevel) -> LogEventLevel:
    """Resolve a level from a name, alias or number.

    Args:
        level: Level name (case-insensitive), alias, or numeric value 0-5

    Returns:
        The matching ``LogEventLevel``.

    Raises:
        ValueError: If the level is not recognised
    """
    if isinstance(level, LogEventLevel):
        return level
    if isinstance(level, int):
        try:
            return LogEventLevel(level)
        except ValueError:
            raise ValueError(f"Unknown log level {level!r}") from None
    try:
        return _ALIASES[level.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown log level {level!r}") from None


def from_stdlib_level(levelno: int) -> LogEventLevel:
    """Map a standard-library ``logging`` level number onto a LogEventLevel."""
    if levelno < logging.DEBUG:
        return LogEventLevel.VERBOSE
    if levelno < logging.INFO:
        return LogEventLevel.DEBUG
    if levelno < logging.WARNING:
        return LogEventLevel.INFORMATION
    if levelno < logging.ERROR:
        return LogEventLevel.WARNING
    if levelno < logging.CRITICAL:
        return LogEventLevel.ERROR
    return LogEventLevel.FATAL
