"""
Periodic batching core.

``PeriodicBatchingSink`` decouples high-frequency event production from
lower-frequency network transmission:

- Producers call ``emit()`` from any thread. The event is appended to an
  in-memory buffer under a lock; producers never wait on I/O.
- One daemon worker thread runs a private asyncio loop. Every ``period``
  seconds, or as soon as the buffer reaches ``batch_size_limit``, it swaps
  the buffer for an empty one and hands the swapped-out events to
  ``emit_batch()`` in chunks of at most ``batch_size_limit``, in arrival order.
- Flushes are serialised by a single lock. A timer tick that finds a flush
  still in flight is skipped; accumulation continues.
- A failing ``emit_batch()`` is reported through diagnostics and its events
  are dropped. The batch is never re-enqueued and the loop keeps running.
- ``dispose()`` stops the timer, drains everything still buffered, waits up
  to ``dispose_timeout`` seconds (cancelling an overrunning flush), and then
  calls ``release()`` exactly once, whatever the outcome of the drain.

State machine: CREATED -> STARTED -> DISPOSING -> DISPOSED. Nothing leaves
DISPOSED; events emitted from DISPOSING onwards are dropped.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
import time
from collections.abc import Awaitable, Callable, Sequence
from datetime import timedelta
from enum import Enum
from typing import Any

from ..metrics.metrics import MetricsCollector
from . import diagnostics
from .errors import ConfigurationError, ErrorCategory, SinkDisposedError
from .events import LogEvent

DEFAULT_DISPOSE_TIMEOUT = 10.0

# A reasonable default for the number of events posted in each batch
DEFAULT_BATCH_POSTING_LIMIT = 100

# A reasonable default time to wait between checking for event batches
DEFAULT_PERIOD = 30.0


class SinkState(str, Enum):
    CREATED = "created"
    STARTED = "started"
    DISPOSING = "disposing"
    DISPOSED = "disposed"


def _as_seconds(value: float | timedelta | None, name: str) -> float:
    if isinstance(value, timedelta):
        value = value.total_seconds()
    if value is None or isinstance(value, bool) or float(value) <= 0:
        raise ConfigurationError(f"{name} must be > 0 seconds")
    return float(value)


def _category(exc: BaseException, default: ErrorCategory) -> str:
    category = getattr(exc, "category", default)
    return ErrorCategory(category).value


def _run_coroutine_blocking(
    factory: Callable[[], Awaitable[Any]], timeout: float | None
) -> None:
    """Run a coroutine to completion from synchronous code.

    Uses ``asyncio.run`` directly when the calling thread has no running
    loop, otherwise a short-lived helper thread.
    """

    async def _bounded() -> None:
        await asyncio.wait_for(factory(), timeout=timeout)

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(_bounded())
        return
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as ex:
        ex.submit(asyncio.run, _bounded()).result()


class PeriodicBatchingSink:
    """Base class for sinks that send events in periodic batches.

    Subclasses implement ``emit_batch()`` and, when they own a resource,
    ``release()``.
    """

    def __init__(
        self,
        batch_size_limit: int,
        period: float | timedelta,
        *,
        dispose_timeout: float | timedelta = DEFAULT_DISPOSE_TIMEOUT,
        metrics: MetricsCollector | None = None,
    ) -> None:
        if isinstance(batch_size_limit, bool) or int(batch_size_limit) < 1:
            raise ConfigurationError("batch_size_limit must be >= 1")
        self._batch_size_limit = int(batch_size_limit)
        self._period = _as_seconds(period, "period")
        self._dispose_timeout = _as_seconds(dispose_timeout, "dispose_timeout")
        self._metrics = metrics

        self._lock = threading.Lock()
        self._buffer: list[LogEvent] = []
        self._state = SinkState.CREATED
        self._counters: dict[str, int] = {
            "emitted": 0,
            "flushed": 0,
            "batches": 0,
            "dropped": 0,
            "dropped_after_dispose": 0,
            "flush_errors": 0,
        }
        self._post_dispose_reported = False
        self._wake_pending = False
        self._stopping = False
        self._released = False

        # Bound lazily to whichever loop first waits on them
        self._wake = asyncio.Event()
        self._flush_lock = asyncio.Lock()

        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._worker_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    @property
    def batch_size_limit(self) -> int:
        return self._batch_size_limit

    @property
    def period(self) -> float:
        return self._period

    @property
    def state(self) -> SinkState:
        return self._state

    @property
    def counters(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def pending_count(self) -> int:
        with self._lock:
            return len(self._buffer)

    def emit(self, event: LogEvent) -> None:
        """Buffer one event. Thread-safe; never blocks on I/O."""
        wake = False
        report_drop = False
        with self._lock:
            if self._state in (SinkState.DISPOSING, SinkState.DISPOSED):
                self._counters["dropped_after_dispose"] += 1
                report_drop = not self._post_dispose_reported
                self._post_dispose_reported = True
            else:
                self._buffer.append(event)
                self._counters["emitted"] += 1
                if (
                    len(self._buffer) >= self._batch_size_limit
                    and not self._wake_pending
                    and self._loop is not None
                ):
                    self._wake_pending = True
                    wake = True
        if report_drop:
            diagnostics.warn(
                "sink",
                "event emitted after dispose was dropped",
                sink=type(self).__name__,
            )
        if wake:
            self._signal_wake()

    def start(self) -> None:
        """Start the background flush loop. Idempotent while started."""
        with self._lock:
            if self._state in (SinkState.DISPOSING, SinkState.DISPOSED):
                raise SinkDisposedError(f"{type(self).__name__} is already disposed")
            if self._state is SinkState.STARTED:
                return
            ready = threading.Event()
            # Started under the lock so a concurrent dispose always finds it
            self._thread = threading.Thread(
                target=self._thread_main,
                args=(ready,),
                name=f"dogsink-{type(self).__name__}",
                daemon=True,
            )
            self._thread.start()
            self._state = SinkState.STARTED
        ready.wait()
        # Events buffered before start may already exceed the limit
        with self._lock:
            wake = (
                len(self._buffer) >= self._batch_size_limit and not self._wake_pending
            )
            if wake:
                self._wake_pending = True
        if wake:
            self._signal_wake()

    def flush(self, timeout: float | None = None) -> bool:
        """Send everything buffered now and wait for it.

        Returns False when the sink is not running, when called from the
        flush loop itself, or when ``timeout`` elapses first.
        """
        with self._lock:
            loop = self._loop
            running = self._state is SinkState.STARTED and loop is not None
        if not running or loop is None:
            return False
        if threading.current_thread() is self._thread:
            return False
        try:
            fut = asyncio.run_coroutine_threadsafe(
                self._flush_buffer(wait=True), loop
            )
        except RuntimeError:
            return False
        try:
            fut.result(timeout)
        except concurrent.futures.TimeoutError:
            return False
        except concurrent.futures.CancelledError:
            return False
        return True

    def dispose(self) -> None:
        """Stop the loop, drain the buffer, then release resources."""
        with self._lock:
            if self._state in (SinkState.DISPOSING, SinkState.DISPOSED):
                return
            previous = self._state
            self._state = SinkState.DISPOSING
        try:
            if previous is SinkState.STARTED:
                self._stop_worker()
            else:
                self._drain_without_worker()
        finally:
            try:
                if not self._released:
                    _run_coroutine_blocking(self._release_once, self._dispose_timeout)
            except Exception as exc:
                diagnostics.warn(
                    "sink",
                    "release failed",
                    sink=type(self).__name__,
                    error_type=type(exc).__name__,
                    error=str(exc),
                    category=_category(exc, ErrorCategory.LIFECYCLE),
                )
            finally:
                with self._lock:
                    self._state = SinkState.DISPOSED

    close = dispose

    def __enter__(self) -> PeriodicBatchingSink:
        self.start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    async def emit_batch(self, events: Sequence[LogEvent]) -> int | None:
        """Send one batch. Exceptions are contained by the caller.

        Returns the number of events actually sent, or ``None`` when the
        whole batch was sent. Events a subclass skips should be reported
        through ``_record_dropped``.
        """
        raise NotImplementedError

    async def release(self) -> None:
        """Release owned resources. Called once, after the final flush."""
        return None

    def _record_dropped(self, count: int) -> None:
        """Count events a subclass discarded inside ``emit_batch``."""
        if count <= 0:
            return
        with self._lock:
            self._counters["dropped"] += count

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _signal_wake(self) -> None:
        loop = self._loop
        if loop is None:
            return
        try:
            loop.call_soon_threadsafe(self._wake.set)
        except RuntimeError:
            # Loop already closed; the final drain has run
            pass

    def _thread_main(self, ready: threading.Event) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        with self._lock:
            self._loop = loop
        try:
            self._worker_task = loop.create_task(self._run())
            ready.set()
            loop.run_until_complete(self._worker_task)
        except asyncio.CancelledError:
            diagnostics.warn(
                "worker",
                "flush loop cancelled during dispose",
                sink=type(self).__name__,
            )
        except Exception as exc:  # pragma: no cover - defensive catch
            diagnostics.warn(
                "worker",
                "flush loop error",
                error_type=type(exc).__name__,
                error=str(exc),
                category=_category(exc, ErrorCategory.LIFECYCLE),
            )
        finally:
            ready.set()
            try:
                if self._stopping:
                    loop.run_until_complete(self._release_once())
            finally:
                with self._lock:
                    self._loop = None
                loop.close()

    async def _run(self) -> None:
        while not self._stopping:
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self._period)
            except asyncio.TimeoutError:
                pass
            self._wake.clear()
            with self._lock:
                self._wake_pending = False
            if self._stopping:
                break
            await self._flush_buffer(wait=False)
        await self._flush_buffer(wait=True)

    async def _flush_buffer(self, *, wait: bool) -> None:
        if not wait and self._flush_lock.locked():
            diagnostics.debug(
                "sink",
                "flush skipped; previous flush still in flight",
                _rate_limit_key="flush-skipped",
            )
            return
        async with self._flush_lock:
            with self._lock:
                pending, self._buffer = self._buffer, []
            limit = self._batch_size_limit
            for start in range(0, len(pending), limit):
                await self._emit_batch_safely(pending[start : start + limit])

    async def _emit_batch_safely(self, batch: list[LogEvent]) -> None:
        start = time.perf_counter()
        try:
            sent = await self.emit_batch(batch)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            with self._lock:
                self._counters["flush_errors"] += 1
                self._counters["dropped"] += len(batch)
            diagnostics.warn(
                "sink",
                "batch emit failed",
                sink=type(self).__name__,
                batch_size=len(batch),
                error_type=type(exc).__name__,
                error=str(exc),
                category=_category(exc, ErrorCategory.TRANSPORT),
                _rate_limit_key="batch-emit-failed",
            )
            await self._record_failure_metrics(len(batch))
            return
        sent = len(batch) if sent is None else sent
        if sent <= 0:
            return
        with self._lock:
            self._counters["batches"] += 1
            self._counters["flushed"] += sent
        await self._record_flush_metrics(sent, time.perf_counter() - start)

    async def _record_flush_metrics(
        self, batch_size: int, latency_seconds: float
    ) -> None:
        if self._metrics is None:
            return
        try:
            await self._metrics.record_flush(
                batch_size=batch_size,
                latency_seconds=latency_seconds,
            )
        except Exception:
            pass

    async def _record_failure_metrics(self, batch_size: int) -> None:
        if self._metrics is None:
            return
        try:
            await self._metrics.record_flush_error()
            await self._metrics.record_events_dropped(batch_size, reason="transport")
        except Exception:
            pass

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _stop_worker(self) -> None:
        thread = self._thread
        self._stopping = True
        self._signal_wake()
        if thread is None:
            return
        thread.join(self._dispose_timeout)
        if not thread.is_alive():
            return
        diagnostics.warn(
            "sink",
            "final flush timed out; cancelling",
            sink=type(self).__name__,
            timeout_seconds=self._dispose_timeout,
        )
        loop = self._loop
        task = self._worker_task
        if loop is not None and task is not None:
            try:
                loop.call_soon_threadsafe(task.cancel)
            except RuntimeError:
                pass
        thread.join(min(1.0, self._dispose_timeout))

    def _drain_without_worker(self) -> None:
        # Never started: run the final drain on a temporary loop
        try:
            _run_coroutine_blocking(
                lambda: self._flush_buffer(wait=True), self._dispose_timeout
            )
        except Exception as exc:
            diagnostics.warn(
                "sink",
                "final flush failed",
                sink=type(self).__name__,
                error_type=type(exc).__name__,
                error=str(exc),
                category=_category(exc, ErrorCategory.LIFECYCLE),
            )

    async def _release_once(self) -> None:
        with self._lock:
            if self._released:
                return
            self._released = True
        try:
            await self.release()
        except Exception as exc:
            diagnostics.warn(
                "sink",
                "release failed",
                sink=type(self).__name__,
                error_type=type(exc).__name__,
                error=str(exc),
                category=_category(exc, ErrorCategory.LIFECYCLE),
            )


__all__ = [
    "DEFAULT_BATCH_POSTING_LIMIT",
    "DEFAULT_DISPOSE_TIMEOUT",
    "DEFAULT_PERIOD",
    "PeriodicBatchingSink",
    "SinkState",
]
