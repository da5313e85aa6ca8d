"""
Pytest fixtures for dogsink tests.

Register with ``pytest_plugins = ("dogsink.testing.fixtures",)``.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest

from ..core.configuration import DatadogConfiguration
from ..sink import DatadogSink
from .mocks import RecordingTransport


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def datadog_configuration() -> DatadogConfiguration:
    return DatadogConfiguration(hostname="test-host", tags=("env:test",))


@pytest.fixture
def make_sink(
    recording_transport: RecordingTransport,
    datadog_configuration: DatadogConfiguration,
) -> Generator[Callable[..., DatadogSink], None, None]:
    """Factory for sinks wired to ``recording_transport``; disposed on teardown."""
    created: list[DatadogSink] = []

    def _make(**kwargs: Any) -> DatadogSink:
        kwargs.setdefault("transport", recording_transport)
        configuration = kwargs.pop("configuration", datadog_configuration)
        batch_size_limit = kwargs.pop("batch_size_limit", 100)
        period = kwargs.pop("period", 30.0)
        sink = DatadogSink(configuration, batch_size_limit, period, **kwargs)
        created.append(sink)
        return sink

    yield _make
    for sink in created:
        sink.dispose()
