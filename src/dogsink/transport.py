"""
DogStatsD transport.

The batching core hands a whole batch of ``FormattedRecord`` values to a
``Transport`` in one ``send`` call. ``DogStatsdTransport`` encodes each record
as a DogStatsD event datagram::

    _e{<title bytes>,<text bytes>}:<title>|<text>|h:<hostname>|t:<alert>|#tag1,tag2

and packs as many datagrams per UDP packet as ``max_packet_size`` allows,
separated by newlines.
"""

from __future__ import annotations

import socket
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from .core.errors import ConfigurationError, TransportError

DEFAULT_MAX_PACKET_SIZE = 8192


class AlertType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class FormattedRecord:
    """A single event ready for transmission."""

    title: str
    text: str
    alert_type: AlertType
    hostname: str | None = None
    tags: tuple[str, ...] = ()


@runtime_checkable
class Transport(Protocol):
    """Network client delivering formatted records to the collector."""

    async def send(self, records: Sequence[FormattedRecord]) -> None:  # noqa: D401
        """Transmit all records as one logical send operation."""
        ...

    async def close(self) -> None: ...


def _escape_text(value: str) -> str:
    return value.replace("\r\n", "\\n").replace("\n", "\\n").replace("\r", "\\n")


def _sanitize_tag(tag: str) -> str:
    for ch in ("|", ",", "\n", "\r"):
        tag = tag.replace(ch, "_")
    return tag


def encode_event(record: FormattedRecord) -> bytes:
    """Encode one record as a DogStatsD event datagram."""
    title = _escape_text(record.title).encode("utf-8")
    text = _escape_text(record.text).encode("utf-8")
    parts = [b"_e{%d,%d}:" % (len(title), len(text)) + title + b"|" + text]
    if record.hostname:
        parts.append(b"h:" + _sanitize_tag(record.hostname).encode("utf-8"))
    parts.append(b"t:" + AlertType(record.alert_type).value.encode("ascii"))
    if record.tags:
        tags = ",".join(_sanitize_tag(t) for t in record.tags)
        parts.append(b"#" + tags.encode("utf-8"))
    return b"|".join(parts)


def encode_packets(
    records: Sequence[FormattedRecord],
    max_packet_size: int = DEFAULT_MAX_PACKET_SIZE,
) -> list[bytes]:
    """Pack encoded records into newline-separated UDP payloads.

    A single record larger than ``max_packet_size`` is sent on its own rather
    than truncated, since truncation would corrupt the length header.
    """
    packets: list[bytes] = []
    current: list[bytes] = []
    size = 0
    for record in records:
        line = encode_event(record)
        extra = len(line) + (1 if current else 0)
        if current and size + extra > max_packet_size:
            packets.append(b"\n".join(current))
            current, size = [], 0
            extra = len(line)
        current.append(line)
        size += extra
    if current:
        packets.append(b"\n".join(current))
    return packets


class DogStatsdTransport:
    """UDP client for a DogStatsD agent.

    The socket is opened at construction and closed exactly once by
    ``close()``. Address resolution failures surface immediately as
    ``ConfigurationError``.
    """

    name = "dogstatsd"

    def __init__(
        self,
        server: str,
        port: int,
        *,
        max_packet_size: int = DEFAULT_MAX_PACKET_SIZE,
    ) -> None:
        if max_packet_size <= 0:
            raise ConfigurationError("max_packet_size must be > 0")
        try:
            infos = socket.getaddrinfo(server, port, type=socket.SOCK_DGRAM)
        except (OSError, UnicodeError) as exc:
            raise ConfigurationError(
                f"Cannot resolve DogStatsD server {server}:{port}", cause=exc
            ) from exc
        if not infos:
            raise ConfigurationError(f"Cannot resolve DogStatsD server {server}:{port}")
        family, _, _, _, address = infos[0]
        self._sock = socket.socket(family, socket.SOCK_DGRAM)
        self._address = address
        self._max_packet_size = max_packet_size
        self._closed = False

    @property
    def address(self) -> tuple[str, int]:
        return (self._address[0], self._address[1])

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, records: Sequence[FormattedRecord]) -> None:
        packets = encode_packets(records, self._max_packet_size)
        if not packets:
            return
        if self._closed:
            raise TransportError("DogStatsD transport is closed")
        # No executor: pools refuse new work once interpreter exit begins
        try:
            self._send_packets(packets)
        except OSError as exc:
            raise TransportError(
                f"Failed to send {len(packets)} packet(s) to DogStatsD", cause=exc
            ) from exc

    def _send_packets(self, packets: list[bytes]) -> None:
        for packet in packets:
            self._sock.sendto(packet, self._address)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._sock.close()


__all__ = [
    "AlertType",
    "DEFAULT_MAX_PACKET_SIZE",
    "DogStatsdTransport",
    "FormattedRecord",
    "Transport",
    "encode_event",
    "encode_packets",
]
