"""
Internal diagnostics channel.

Non-fatal problems inside the sink (transport failures, formatter errors,
events dropped after disposal) are never raised to the application. They are
reported here instead, as one JSON line per message on stderr, and only when
internal logging is enabled via ``DOGSINK_CORE__INTERNAL_LOGGING_ENABLED``.

Emission is best-effort: nothing in this module raises.
"""

from __future__ import annotations

import sys
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable

import orjson

# Cached on first use; reset to None in tests for isolation
_internal_logging_enabled: bool | None = None

# Per-key rate limiting: at most _RATE_LIMIT_MAX messages per window
_RATE_LIMIT_WINDOW_SECONDS = 10.0
_RATE_LIMIT_MAX = 5
_rate_state: dict[str, tuple[float, int]] = {}
_rate_lock = threading.Lock()

_writer: Callable[[bytes], None] | None = None


def _default_writer(line: bytes) -> None:
    stream = sys.stderr
    buf = getattr(stream, "buffer", None)
    if buf is not None:
        buf.write(line)
        buf.flush()
    else:
        stream.write(line.decode("utf-8", errors="replace"))
        stream.flush()


def set_writer(writer: Callable[[bytes], None] | None) -> None:
    """Redirect diagnostics output; ``None`` restores stderr."""
    global _writer
    _writer = writer


def set_enabled(enabled: bool | None) -> None:
    """Override the cached setting; ``None`` re-reads settings on next use."""
    global _internal_logging_enabled
    _internal_logging_enabled = enabled


def is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(
                Settings().core.internal_logging_enabled
            )
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def _allow(key: str | None) -> bool:
    if key is None:
        return True
    now = time.monotonic()
    with _rate_lock:
        start, count = _rate_state.get(key, (now, 0))
        if now - start >= _RATE_LIMIT_WINDOW_SECONDS:
            start, count = now, 0
        if count >= _RATE_LIMIT_MAX:
            _rate_state[key] = (start, count)
            return False
        _rate_state[key] = (start, count + 1)
        return True


def _emit(
    level: str,
    component: str,
    message: str,
    rate_limit_key: str | None,
    fields: dict[str, Any],
) -> None:
    try:
        if not is_enabled():
            return
        if not _allow(rate_limit_key):
            return
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "component": component,
            "message": message,
            **fields,
        }
        line = orjson.dumps(payload, default=str) + b"\n"
        (_writer or _default_writer)(line)
    except Exception:
        # Diagnostics must never break the caller
        pass


def warn(
    component: str,
    message: str,
    *,
    _rate_limit_key: str | None = None,
    **fields: Any,
) -> None:
    """Report a contained, non-fatal problem."""
    _emit("WARN", component, message, _rate_limit_key, fields)


def debug(
    component: str,
    message: str,
    *,
    _rate_limit_key: str | None = None,
    **fields: Any,
) -> None:
    _emit("DEBUG", component, message, _rate_limit_key, fields)


def _reset_rate_limits() -> None:
    """Clear rate-limiter state (for testing only)."""
    with _rate_lock:
        _rate_state.clear()
