"""Timed log sections wrapping one exchange with a stream peer."""

from __future__ import annotations

import time
from contextlib import AbstractContextManager
from typing import Any

from .logger import error_fields, get_logger


class TraceSection(AbstractContextManager["TraceSection"]):
    """Log the start and end of a peer exchange with the bytes it moved.

    Once a peer is attached every record also carries the peer's socket path
    and whether it is still connected, so the closing record shows whether the
    connection outlived the section.

    Args:
        name: Section identifier used as the log message prefix.
        logger: Optional structured logger implementing ``info``/``debug``/``error``.
        metadata: Static fields added to every record.
        peer: Optional peer whose connection state is reported.
    """

    def __init__(
        self,
        *,
        name: str,
        logger: Any | None = None,
        metadata: dict[str, Any] | None = None,
        peer: Any | None = None,
    ) -> None:
        self.name = name
        self.bytes_sent = 0
        self.bytes_received = 0
        self._logger = logger or get_logger(f"unix_peer.telemetry.section.{name}")
        self._metadata = dict(metadata or {})
        self._peer = peer
        self._started: float | None = None

    def attach(self, peer: Any) -> None:
        """Report ``peer``'s path and connection state from now on."""

        self._peer = peer

    def sent(self, count: int) -> None:
        self.bytes_sent += count

    def received(self, count: int) -> None:
        self.bytes_received += count

    def _fields(self, **extra: Any) -> dict[str, Any]:
        fields = dict(self._metadata)
        if self._peer is not None:
            fields["path"] = self._peer.get_connected_path() or None
            fields["connected"] = self._peer.is_connected()
        fields.update(extra)
        return fields

    def __enter__(self) -> "TraceSection":
        self._started = time.perf_counter()
        self._logger.info(f"{self.name} :: start", **self._fields())
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        now = time.perf_counter()
        totals = {
            "duration_ms": round((now - (self._started or now)) * 1000.0, 3),
            "bytes_sent": self.bytes_sent,
            "bytes_received": self.bytes_received,
        }
        if exc is None:
            self._logger.info(f"{self.name} :: complete", **self._fields(**totals))
        else:
            totals.update(error_fields(exc))
            self._logger.error(f"{self.name} :: error", **self._fields(**totals))
        return False

    def debug(self, event: str, **kwargs: Any) -> None:
        """Emit a DEBUG record for ``event`` inside the section."""

        self._logger.debug(f"{self.name} :: {event}", **self._fields(**kwargs))


def trace_section(
    name: str,
    *,
    logger: Any | None = None,
    metadata: dict[str, Any] | None = None,
    peer: Any | None = None,
) -> TraceSection:
    """Return a :class:`TraceSection` for ``name``."""

    return TraceSection(name=name, logger=logger, metadata=metadata, peer=peer)


__all__ = ["TraceSection", "trace_section"]
