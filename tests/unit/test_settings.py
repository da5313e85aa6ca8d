"""
Unit tests for environment-driven Settings.
"""

import os

import pytest
from pydantic import ValidationError

from dogsink.core.batching import (
    DEFAULT_BATCH_POSTING_LIMIT,
    DEFAULT_DISPOSE_TIMEOUT,
    DEFAULT_PERIOD,
)
from dogsink.core.configuration import DatadogConfiguration
from dogsink.core.levels import LogEventLevel
from dogsink.core.settings import Settings, SinkSettings


class TestSettings:
    """Test Settings defaults and overrides."""

    def test_default_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Defaults match the facade defaults."""
        for key in list(os.environ):
            if key.startswith("DOGSINK_"):
                monkeypatch.delenv(key)
        settings = Settings()

        assert settings.datadog.statsd_server == "127.0.0.1"
        assert settings.datadog.statsd_port == 8125
        assert settings.datadog.tags == []
        assert settings.datadog.max_packet_size == 8192
        assert settings.sink.batch_posting_limit == 100
        assert settings.sink.period_seconds == 30.0
        assert settings.sink.minimum_level is LogEventLevel.VERBOSE
        assert settings.core.enable_metrics is False
        assert settings.core.atexit_dispose_enabled is True

    def test_sink_defaults_follow_batching_constants(self) -> None:
        """Settings and the facade share one set of defaults."""
        sink = SinkSettings()

        assert sink.batch_posting_limit == DEFAULT_BATCH_POSTING_LIMIT
        assert sink.period_seconds == DEFAULT_PERIOD
        assert sink.dispose_timeout_seconds == DEFAULT_DISPOSE_TIMEOUT

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested env vars use the double-underscore delimiter."""
        monkeypatch.setenv("DOGSINK_DATADOG__STATSD_SERVER", "dd-agent")
        monkeypatch.setenv("DOGSINK_DATADOG__STATSD_PORT", "9125")
        monkeypatch.setenv("DOGSINK_DATADOG__TAGS", '["env:prod", "team:core"]')
        monkeypatch.setenv("DOGSINK_SINK__MINIMUM_LEVEL", "warn")
        monkeypatch.setenv("DOGSINK_SINK__BATCH_POSTING_LIMIT", "500")
        monkeypatch.setenv("DOGSINK_CORE__ENABLE_METRICS", "true")

        settings = Settings()

        assert settings.datadog.statsd_server == "dd-agent"
        assert settings.datadog.statsd_port == 9125
        assert settings.datadog.tags == ["env:prod", "team:core"]
        assert settings.sink.minimum_level is LogEventLevel.WARNING
        assert settings.sink.batch_posting_limit == 500
        assert settings.core.enable_metrics is True

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"batch_posting_limit": 0},
            {"period_seconds": 0},
            {"dispose_timeout_seconds": -1},
            {"minimum_level": "loud"},
        ],
    )
    def test_sink_validation(self, kwargs: dict) -> None:
        """Invalid batching values are rejected."""
        with pytest.raises(ValidationError):
            SinkSettings(**kwargs)

    def test_invalid_port_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(datadog={"statsd_port": 70000})

    def test_to_configuration(self) -> None:
        """Settings convert to an immutable DatadogConfiguration."""
        settings = Settings(
            datadog={
                "statsd_server": "10.0.0.5",
                "hostname": "web-1",
                "tags": ["env:test"],
                "prefix": "svc",
            }
        )

        cfg = settings.to_configuration()

        assert isinstance(cfg, DatadogConfiguration)
        assert cfg.statsd_server == "10.0.0.5"
        assert cfg.statsd_port == 8125
        assert cfg.hostname == "web-1"
        assert cfg.tags == ("env:test",)
        assert cfg.prefix == "svc"
