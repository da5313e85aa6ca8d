from __future__ import annotations

import pytest

from dogsink.metrics.metrics import MetricsCollector


@pytest.mark.asyncio
async def test_disabled_metrics_noop_and_state() -> None:
    mc = MetricsCollector(enabled=False)
    # In-memory state is tracked even when the exporter is disabled
    await mc.record_flush(batch_size=5, latency_seconds=0.01)
    await mc.record_events_dropped(2, reason="transport")
    await mc.record_flush_error()
    snap = await mc.snapshot()
    assert snap.batches_flushed == 1
    assert snap.events_sent == 5
    assert snap.events_dropped == 2
    assert snap.flush_errors == 1
    assert mc.registry is None
    assert mc.is_enabled is False


@pytest.mark.asyncio
async def test_enabled_counters_and_histograms() -> None:
    mc = MetricsCollector(enabled=True)
    await mc.record_flush(batch_size=7, latency_seconds=0.004)
    await mc.record_flush(batch_size=3, latency_seconds=0.002)
    await mc.record_events_dropped(4, reason="format")
    await mc.record_flush_error()

    reg = mc.registry
    assert reg is not None
    assert reg.get_sample_value("dogsink_events_sent_total") == 10
    assert reg.get_sample_value("dogsink_batches_flushed_total") == 2
    assert reg.get_sample_value("dogsink_flush_errors_total") == 1
    assert (
        reg.get_sample_value("dogsink_events_dropped_total", {"reason": "format"})
        == 4
    )
    assert reg.get_sample_value("dogsink_batch_size_count") == 2
    assert reg.get_sample_value("dogsink_flush_seconds_count") == 2


@pytest.mark.asyncio
async def test_non_positive_drop_count_ignored() -> None:
    mc = MetricsCollector(enabled=True)
    await mc.record_events_dropped(0)
    await mc.record_events_dropped(-3)
    snap = await mc.snapshot()
    assert snap.events_dropped == 0


@pytest.mark.asyncio
async def test_collectors_are_isolated() -> None:
    a = MetricsCollector(enabled=True)
    b = MetricsCollector(enabled=True)
    await a.record_flush(batch_size=1, latency_seconds=0.0)
    assert a.registry is not b.registry
    assert b.registry is not None
    assert b.registry.get_sample_value("dogsink_batches_flushed_total") == 0
