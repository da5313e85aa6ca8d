"""
Sink metrics collection.

Implements a small Prometheus-compatible counter/histogram set for the
batching core.

Design goals:
- No global state; every collector owns an isolated registry
- Safe no-op exporter behavior when metrics are disabled by settings
- In-memory counters always tracked so tests can assert on them
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram


@dataclass
class SinkMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    events_sent: int = 0
    events_dropped: int = 0
    batches_flushed: int = 0
    flush_errors: int = 0


class MetricsCollector:
    """Instance-scoped metrics collector.

    Methods are coroutines so they can be awaited from the flush loop; the
    in-memory state is guarded by a thread lock because ``snapshot`` may be
    called from producer threads.
    """

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = threading.Lock()
        self._state = SinkMetrics()

        self._c_sent: Any | None = None
        self._c_dropped: Any | None = None
        self._c_batches: Any | None = None
        self._c_flush_errors: Any | None = None
        self._h_batch_size: Any | None = None
        self._h_flush_latency: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            self._registry = CollectorRegistry()
            self._c_sent = Counter(
                "dogsink_events_sent_total",
                "Total number of events handed to the transport",
                registry=self._registry,
            )
            self._c_dropped = Counter(
                "dogsink_events_dropped_total",
                "Total number of events dropped",
                ["reason"],
                registry=self._registry,
            )
            self._c_batches = Counter(
                "dogsink_batches_flushed_total",
                "Total number of batches sent successfully",
                registry=self._registry,
            )
            self._c_flush_errors = Counter(
                "dogsink_flush_errors_total",
                "Total number of failed batch sends",
                registry=self._registry,
            )
            self._h_batch_size = Histogram(
                "dogsink_batch_size",
                "Number of events per flushed batch",
                buckets=(1, 5, 10, 25, 50, 100, 250, 500, 1000),
                registry=self._registry,
            )
            self._h_flush_latency = Histogram(
                "dogsink_flush_seconds",
                "Latency of a single batch send",
                buckets=(
                    0.0005,
                    0.001,
                    0.0025,
                    0.005,
                    0.01,
                    0.025,
                    0.05,
                    0.1,
                    0.25,
                    0.5,
                    1.0,
                ),
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    async def record_flush(self, *, batch_size: int, latency_seconds: float) -> None:
        with self._lock:
            self._state.batches_flushed += 1
            self._state.events_sent += batch_size
        if not self._enabled:
            return
        if self._c_batches is not None:
            self._c_batches.inc()
        if self._c_sent is not None:
            self._c_sent.inc(batch_size)
        if self._h_batch_size is not None:
            self._h_batch_size.observe(batch_size)
        if self._h_flush_latency is not None:
            self._h_flush_latency.observe(latency_seconds)

    async def record_events_dropped(self, count: int, *, reason: str = "unknown") -> None:
        if count <= 0:
            return
        with self._lock:
            self._state.events_dropped += count
        if self._enabled and self._c_dropped is not None:
            self._c_dropped.labels(reason=reason).inc(count)

    async def record_flush_error(self) -> None:
        with self._lock:
            self._state.flush_errors += 1
        if self._enabled and self._c_flush_errors is not None:
            self._c_flush_errors.inc()

    async def snapshot(self) -> SinkMetrics:
        # Lightweight copy without exposing internals
        with self._lock:
            return SinkMetrics(
                events_sent=self._state.events_sent,
                events_dropped=self._state.events_dropped,
                batches_flushed=self._state.batches_flushed,
                flush_errors=self._state.flush_errors,
            )
