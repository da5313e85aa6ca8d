"""
Basic usage example for dogsink.

Sends a few events to a DogStatsD agent on localhost:8125 and routes the
standard-library ``logging`` module through the same sink.
"""

import logging

from dogsink import (
    DatadogConfiguration,
    LogEvent,
    LogEventLevel,
    datadog_sink,
    enable_stdlib_bridge,
)


def main() -> None:
    """Demonstrate basic dogsink usage."""

    configuration = (
        DatadogConfiguration()
        .with_hostname("example-host")
        .with_tags("env:development", "service:example")
        .with_prefix("example")
    )

    # Batches of up to 50 events, flushed every 5 seconds
    sink = datadog_sink(
        configuration,
        restricted_to_minimum_level=LogEventLevel.INFORMATION,
        batch_posting_limit=50,
        period=5.0,
    )

    sink.emit(
        LogEvent.create(
            LogEventLevel.INFORMATION,
            "Application started in {StartupMs} ms",
            StartupMs=512,
        )
    )

    # Route stdlib logging through the same sink
    enable_stdlib_bridge(sink, level=logging.INFO)
    log = logging.getLogger("example")
    log.warning(
        "Cache {CacheName} is {Pct}% full",
        extra={"CacheName": "users", "Pct": 91},
    )

    try:
        1 / 0
    except ZeroDivisionError:
        log.exception("Computation failed")

    # Drains everything still buffered before returning
    sink.dispose()


if __name__ == "__main__":
    main()
