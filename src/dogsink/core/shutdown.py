"""Dispose registered sinks at interpreter exit.

The flush loop runs on a daemon thread, so anything still buffered when the
interpreter exits would otherwise be lost. Sinks registered here are disposed
by an ``atexit`` handler, which runs their final forced flush.

Registration uses a WeakSet so a registered sink can still be garbage
collected. The handler is best-effort and never raises.
"""

from __future__ import annotations

import atexit
import weakref
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .batching import PeriodicBatchingSink


_shutdown_in_progress: bool = False
_registered_sinks: weakref.WeakSet[Any] = weakref.WeakSet()


def register_sink(sink: PeriodicBatchingSink) -> None:
    """Register a sink for automatic dispose on exit."""
    _registered_sinks.add(sink)


def unregister_sink(sink: PeriodicBatchingSink) -> None:
    """Unregister a sink, typically after an explicit dispose."""
    _registered_sinks.discard(sink)


def registered_count() -> int:
    return len(_registered_sinks)


def _atexit_handler() -> None:
    """Best-effort dispose of all registered sinks."""
    global _shutdown_in_progress

    if _shutdown_in_progress:
        return
    _shutdown_in_progress = True

    # Snapshot the sinks (WeakSet iteration can fail if GC runs)
    try:
        sinks = list(_registered_sinks)
    except Exception:  # pragma: no cover - rare GC race
        return

    for sink in sinks:
        try:
            sink.dispose()
        except Exception:
            pass  # Best effort - don't crash on exit


atexit.register(_atexit_handler)
