from __future__ import annotations

import logging

import pytest

from dogsink.core.levels import (
    LogEventLevel,
    from_stdlib_level,
    parse_level,
)


def test_levels_are_ordered() -> None:
    assert (
        LogEventLevel.VERBOSE
        < LogEventLevel.DEBUG
        < LogEventLevel.INFORMATION
        < LogEventLevel.WARNING
        < LogEventLevel.ERROR
        < LogEventLevel.FATAL
    )


def test_display_name_in_str_and_fstring() -> None:
    level = LogEventLevel.INFORMATION
    assert str(level) == "Information"
    assert f"Log Event - {level}" == "Log Event - Information"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("verbose", LogEventLevel.VERBOSE),
        ("trace", LogEventLevel.VERBOSE),
        ("Debug", LogEventLevel.DEBUG),
        ("INFO", LogEventLevel.INFORMATION),
        ("information", LogEventLevel.INFORMATION),
        ("warn", LogEventLevel.WARNING),
        ("error", LogEventLevel.ERROR),
        ("critical", LogEventLevel.FATAL),
        (" fatal ", LogEventLevel.FATAL),
        (3, LogEventLevel.WARNING),
        (LogEventLevel.ERROR, LogEventLevel.ERROR),
    ],
)
def test_parse_level(name: object, expected: LogEventLevel) -> None:
    assert parse_level(name) is expected  # type: ignore[arg-type]


@pytest.mark.parametrize("bad", ["loud", "", 42])
def test_parse_level_rejects_unknown(bad: object) -> None:
    with pytest.raises(ValueError):
        parse_level(bad)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("levelno", "expected"),
    [
        (5, LogEventLevel.VERBOSE),
        (logging.DEBUG, LogEventLevel.DEBUG),
        (logging.INFO, LogEventLevel.INFORMATION),
        (logging.WARNING, LogEventLevel.WARNING),
        (logging.ERROR, LogEventLevel.ERROR),
        (logging.CRITICAL, LogEventLevel.FATAL),
        (logging.CRITICAL + 10, LogEventLevel.FATAL),
    ],
)
def test_from_stdlib_level(levelno: int, expected: LogEventLevel) -> None:
    assert from_stdlib_level(levelno) is expected
