"""
Mock transports for testing sinks without a DogStatsD agent.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Sequence

from ..core.errors import TransportError
from ..transport import FormattedRecord


class RecordingTransport:
    """Transport that keeps every batch it is asked to send."""

    name = "recording"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.batches: list[list[FormattedRecord]] = []
        self.close_calls = 0

    @property
    def records(self) -> list[FormattedRecord]:
        with self._lock:
            return [r for batch in self.batches for r in batch]

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    async def send(self, records: Sequence[FormattedRecord]) -> None:
        with self._lock:
            self.batches.append(list(records))

    async def close(self) -> None:
        with self._lock:
            self.close_calls += 1


class FailingTransport(RecordingTransport):
    """Transport that fails the sends whose 1-based index is in ``fail_on``.

    With ``fail_on=None`` every send fails.
    """

    name = "failing"

    def __init__(self, fail_on: set[int] | None = None) -> None:
        super().__init__()
        self._fail_on = fail_on
        self.attempts = 0

    async def send(self, records: Sequence[FormattedRecord]) -> None:
        with self._lock:
            self.attempts += 1
            attempt = self.attempts
        if self._fail_on is None or attempt in self._fail_on:
            raise TransportError(f"simulated failure on send {attempt}")
        await super().send(records)


class SlowTransport(RecordingTransport):
    """Transport whose sends take ``delay`` seconds.

    ``in_flight_max`` records the highest number of overlapping sends seen.
    """

    name = "slow"

    def __init__(self, delay: float) -> None:
        super().__init__()
        self._delay = delay
        self._in_flight = 0
        self.in_flight_max = 0

    async def send(self, records: Sequence[FormattedRecord]) -> None:
        with self._lock:
            self._in_flight += 1
            self.in_flight_max = max(self.in_flight_max, self._in_flight)
        try:
            await asyncio.sleep(self._delay)
            await super().send(records)
        finally:
            with self._lock:
                self._in_flight -= 1
