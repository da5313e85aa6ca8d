"""
Error taxonomy for dogsink.

Configuration problems are raised synchronously to the caller. Transport and
formatting problems are raised inside the flush path only, where the batching
core contains them and reports them through ``dogsink.core.diagnostics``.
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    FORMATTING = "formatting"
    LIFECYCLE = "lifecycle"


class DogsinkError(Exception):
    """Base class for all dogsink errors."""

    category: ErrorCategory = ErrorCategory.LIFECYCLE

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class ConfigurationError(DogsinkError, ValueError):
    """Missing or invalid connection or batching details."""

    category = ErrorCategory.CONFIGURATION


class TransportError(DogsinkError):
    """The transport failed to deliver a batch."""

    category = ErrorCategory.TRANSPORT


class SinkDisposedError(DogsinkError, RuntimeError):
    """Raised when a disposed sink is asked to start again."""

    category = ErrorCategory.LIFECYCLE


__all__ = [
    "ConfigurationError",
    "DogsinkError",
    "ErrorCategory",
    "SinkDisposedError",
    "TransportError",
]
