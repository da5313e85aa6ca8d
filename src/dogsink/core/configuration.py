"""
Connection information for the Datadog sink.

``DatadogConfiguration`` is an immutable value shared by every event the sink
sends. The ``with_*`` methods return modified copies:

    cfg = (
        DatadogConfiguration()
        .with_statsd_server("dd-agent", 8125)
        .with_hostname("web-01")
        .with_tags("env:prod", "service:api")
    )
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

DEFAULT_STATSD_SERVER = "127.0.0.1"
DEFAULT_STATSD_PORT = 8125


class DatadogConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    statsd_server: str = Field(
        default=DEFAULT_STATSD_SERVER,
        description="DogStatsD host receiving events",
    )
    statsd_port: int = Field(
        default=DEFAULT_STATSD_PORT,
        ge=1,
        le=65535,
        description="DogStatsD UDP port",
    )
    hostname: str | None = Field(
        default=None, description="Hostname assigned to written events"
    )
    tags: tuple[str, ...] = Field(
        default=(), description="Tags assigned to every written event"
    )
    prefix: str | None = Field(
        default=None, description="Prefix prepended to event titles"
    )

    @field_validator("statsd_server", mode="before")
    @classmethod
    def _default_server(cls, value: str | None) -> str:
        if value is None:
            return DEFAULT_STATSD_SERVER
        value = str(value).strip()
        if not value:
            raise ValueError("statsd_server must not be empty")
        return value

    @field_validator("statsd_port", mode="before")
    @classmethod
    def _default_port(cls, value: int | None) -> int:
        return DEFAULT_STATSD_PORT if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Iterable[str] | str | None) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return tuple(value)

    @classmethod
    def create(
        cls,
        statsd_server: str | None = None,
        statsd_port: int | None = None,
        hostname: str | None = None,
        tags: Iterable[str] | None = None,
        prefix: str | None = None,
    ) -> DatadogConfiguration:
        """Build a configuration, turning validation failures into ConfigurationError."""
        try:
            return cls(
                statsd_server=statsd_server,
                statsd_port=statsd_port,
                hostname=hostname,
                tags=tags,
                prefix=prefix,
            )
        except ValidationError as exc:
            raise ConfigurationError("Invalid Datadog configuration", cause=exc) from exc

    def _copy(self, **changes: object) -> DatadogConfiguration:
        data = self.model_dump()
        data.update(changes)
        return type(self).create(**data)  # type: ignore[arg-type]

    def with_statsd_server(
        self, statsd_server: str | None, statsd_port: int | None = None
    ) -> DatadogConfiguration:
        """Copy with the DogStatsD server set; ``None`` restores the default."""
        return self._copy(statsd_server=statsd_server, statsd_port=statsd_port)

    def with_hostname(self, hostname: str | None) -> DatadogConfiguration:
        return self._copy(hostname=hostname)

    def with_tags(self, *tags: str) -> DatadogConfiguration:
        return self._copy(tags=tags)

    def with_prefix(self, prefix: str | None) -> DatadogConfiguration:
        return self._copy(prefix=prefix)


# Mark Pydantic validators as used for vulture
_VULTURE_USED: tuple[object, ...] = (
    DatadogConfiguration._default_server,
    DatadogConfiguration._default_port,
    DatadogConfiguration._coerce_tags,
)
