"""
Configuration models for dogsink using Pydantic v2 Settings.

All fields can be supplied through the environment with the ``DOGSINK_``
prefix and ``__`` as the nested delimiter, e.g.
``DOGSINK_DATADOG__STATSD_SERVER=dd-agent`` or
``DOGSINK_SINK__BATCH_POSTING_LIMIT=500``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..formatting import DEFAULT_OUTPUT_TEMPLATE
from ..transport import DEFAULT_MAX_PACKET_SIZE
from .batching import (
    DEFAULT_BATCH_POSTING_LIMIT,
    DEFAULT_DISPOSE_TIMEOUT,
    DEFAULT_PERIOD,
)
from .configuration import (
    DEFAULT_STATSD_PORT,
    DEFAULT_STATSD_SERVER,
    DatadogConfiguration,
)
from .levels import LogEventLevel, parse_level


class DatadogSettings(BaseModel):
    """Where and how events reach the DogStatsD agent."""

    statsd_server: str = Field(
        default=DEFAULT_STATSD_SERVER, description="DogStatsD host"
    )
    statsd_port: int = Field(
        default=DEFAULT_STATSD_PORT, ge=1, le=65535, description="DogStatsD UDP port"
    )
    hostname: str | None = Field(
        default=None, description="Hostname attached to every event"
    )
    tags: list[str] = Field(
        default_factory=list, description="Base tags attached to every event"
    )
    prefix: str | None = Field(
        default=None, description="Prefix prepended to event titles"
    )
    max_packet_size: int = Field(
        default=DEFAULT_MAX_PACKET_SIZE,
        ge=512,
        le=65_000,
        description="Maximum UDP payload size in bytes",
    )


class SinkSettings(BaseModel):
    """Batching behavior."""

    output_template: str = Field(
        default=DEFAULT_OUTPUT_TEMPLATE, description="Template for the event body"
    )
    minimum_level: LogEventLevel = Field(
        default=LogEventLevel.VERBOSE,
        description="Events below this level are discarded",
    )
    batch_posting_limit: int = Field(
        default=DEFAULT_BATCH_POSTING_LIMIT,
        ge=1,
        description="Maximum number of events per batch",
    )
    period_seconds: float = Field(
        default=DEFAULT_PERIOD, gt=0.0, description="Seconds between flushes"
    )
    dispose_timeout_seconds: float = Field(
        default=DEFAULT_DISPOSE_TIMEOUT,
        gt=0.0,
        description="Upper bound on the final flush during dispose",
    )

    @field_validator("minimum_level", mode="before")
    @classmethod
    def _parse_minimum_level(cls, value: object) -> LogEventLevel:
        if isinstance(value, (str, int)):
            return parse_level(value)
        return value  # type: ignore[return-value]


class CoreSettings(BaseModel):
    enable_metrics: bool = Field(
        default=False, description="Enable Prometheus-compatible metrics"
    )
    # Structured internal diagnostics for non-fatal errors (sink/transport)
    internal_logging_enabled: bool = Field(
        default=False, description="Emit DEBUG/WARN diagnostics for internal errors"
    )
    atexit_dispose_enabled: bool = Field(
        default=True,
        description="Dispose sinks created from settings at interpreter exit",
    )


class Settings(BaseSettings):
    """Top-level configuration model."""

    datadog: DatadogSettings = Field(default_factory=DatadogSettings)
    sink: SinkSettings = Field(default_factory=SinkSettings)
    core: CoreSettings = Field(default_factory=CoreSettings)

    model_config = SettingsConfigDict(
        env_prefix="DOGSINK_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_configuration(self) -> DatadogConfiguration:
        return DatadogConfiguration.create(
            statsd_server=self.datadog.statsd_server,
            statsd_port=self.datadog.statsd_port,
            hostname=self.datadog.hostname,
            tags=self.datadog.tags,
            prefix=self.datadog.prefix,
        )


# Mark Pydantic validators as used for vulture
_VULTURE_USED: tuple[object, ...] = (SinkSettings._parse_minimum_level,)
