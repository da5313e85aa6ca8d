"""
Testing utilities for dogsink.

Mocks, factories and validators are always available. Pytest fixtures live in
``dogsink.testing.fixtures`` and require pytest.

Example:
    from dogsink.testing import RecordingTransport, create_batch_events

    def test_my_sink():
        transport = RecordingTransport()
        ...
"""

from .factories import create_batch_events, create_log_event
from .mocks import FailingTransport, RecordingTransport, SlowTransport
from .validators import ProtocolViolationError, ValidationResult, validate_transport

__all__ = [
    # Mocks
    "RecordingTransport",
    "FailingTransport",
    "SlowTransport",
    # Factories
    "create_log_event",
    "create_batch_events",
    # Validators
    "validate_transport",
    "ValidationResult",
    "ProtocolViolationError",
]
