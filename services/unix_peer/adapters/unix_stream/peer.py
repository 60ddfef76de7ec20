"""Stream peer connected to a filesystem-addressed Unix domain socket.

The peer owns one ``AF_UNIX``/``SOCK_STREAM`` handle and tracks a small state
machine (:class:`~services.unix_peer.ports.PeerStatus`). Reads and writes are
single-shot: each public call issues at most one ``recv``/``send`` and reports
what the kernel did. Callers that need a full buffer moved loop over the
partial variants (see :mod:`services.unix_peer.application.session`).

Any failed I/O closes the handle. Once the peer is ``NONE`` or ``ERROR`` every
I/O call fails fast until :meth:`UnixStreamPeer.open` succeeds again::

    with UnixStreamPeer() as peer:
        peer.open("/run/example.sock")
        peer.put_data(b"PING")
        data, received = peer.get_partial_data(4096)
"""

from __future__ import annotations

import os
import socket
from typing import Any

from services.unix_peer.ports import (
    PathArg,
    PeerConnectionError,
    PeerEndOfStream,
    PeerIOError,
    PeerNotConnectedError,
    PeerShortReadError,
    PeerShortWriteError,
    PeerStatus,
    PollDirection,
    PollResult,
)
from services.unix_peer.telemetry import get_logger, trace_call

from .address import resolve_socket_path
from .readiness import available_bytes, poll_handle

LOGGER = get_logger("unix_peer.adapters.unix_stream.peer")


def _new_handle() -> socket.socket:
    return socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)


class UnixStreamPeer:
    """Byte-stream peer over a Unix domain socket.

    Args:
        path: Optional socket path remembered for a deferred connect. The peer
            stays ``NONE`` until the first write, which attempts one ``open``
            of this path.
        logger: Optional structured logger; defaults to the module logger.
    """

    def __init__(self, path: PathArg | None = None, *, logger: Any | None = None) -> None:
        self._logger = logger or LOGGER
        self._handle = _new_handle()
        self._status = PeerStatus.NONE
        self._peer_path = ""
        self._pending_path = os.fspath(path) if path is not None else None

    def __enter__(self) -> "UnixStreamPeer":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def __del__(self) -> None:
        if getattr(self, "_handle", None) is not None:
            self.close()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status={self._status.name}, "
            f"path={self._peer_path or self._pending_path or ''!r})"
        )

    # Connection management

    @trace_call(name="UnixStreamPeer.open", logger=LOGGER)
    def open(self, path: PathArg) -> None:
        """Connect to the listening socket at ``path``.

        Validation runs before any connect: over-long or empty paths raise
        :class:`~services.unix_peer.ports.PeerAddressError` and missing paths
        raise :class:`~services.unix_peer.ports.PeerNotFoundError`, leaving
        the peer untouched. A refused or failed connect closes the peer and
        raises :class:`~services.unix_peer.ports.PeerConnectionError`. There
        are no retries.
        """

        target = resolve_socket_path(path)

        if self._status is PeerStatus.CONNECTED:
            self._logger.info(
                "UnixStreamPeer.open(path) :: replacing_connection",
                previous=self._peer_path,
                path=target,
            )
            self.close()
        if self._handle.fileno() < 0:
            self._handle = _new_handle()

        try:
            self._handle.connect(target)
        except OSError as exc:
            self._logger.error(
                "UnixStreamPeer.open(path) :: connect_failed",
                path=target,
                errno=exc.errno,
                error=exc.strerror or str(exc),
            )
            self.close()
            raise PeerConnectionError(
                f"Connection to {target} failed: {exc.strerror or exc}",
                path=target,
                errno=exc.errno,
            ) from exc

        self._status = PeerStatus.CONNECTED
        self._peer_path = target
        self._logger.info("UnixStreamPeer.open(path) :: connected", path=target)

    def close(self) -> None:
        """Release the handle and reset to ``NONE``. Idempotent."""

        try:
            self._handle.close()
        except OSError as exc:
            self._logger.debug(
                "UnixStreamPeer.close(self) :: release_failed",
                path=self._peer_path,
                error=str(exc),
            )
        if self._status is not PeerStatus.NONE:
            self._logger.debug(
                "UnixStreamPeer.close(self) :: closed",
                path=self._peer_path,
                previous=self._status.name,
            )
        self._status = PeerStatus.NONE
        self._peer_path = ""
        self._pending_path = None

    def _fail(self, status: PeerStatus) -> None:
        self.close()
        self._status = status

    def _connect_pending(self) -> None:
        path = self._pending_path
        self._pending_path = None
        self._logger.info("UnixStreamPeer._connect_pending(self) :: connecting", path=path)
        try:
            self.open(path)
        except PeerConnectionError:
            self._fail(PeerStatus.ERROR)
            raise

    def is_connected(self) -> bool:
        """Return whether the cached status is ``CONNECTED``."""

        return self._status is PeerStatus.CONNECTED

    is_connected_to_path = is_connected

    def get_connected_path(self) -> str:
        return self._peer_path

    @property
    def status(self) -> PeerStatus:
        """Cached status, without the refresh performed by :meth:`get_status`."""

        return self._status

    # Readiness

    def poll(self, direction: PollDirection, timeout_ms: int = 0) -> PollResult:
        """Wait up to ``timeout_ms`` for the handle to become ready."""

        return poll_handle(self._handle, direction, timeout_ms)

    def get_available_bytes(self) -> int:
        """Return bytes queued for reading without consuming them; ``-1`` on failure."""

        return available_bytes(self._handle)

    def get_status(self) -> PeerStatus:
        """Refresh the status from the handle and return it.

        A handle that is readable with nothing queued means the remote end
        sent FIN; the peer closes and reports ``NONE``. An error reported by
        a read/write poll closes the peer and reports ``ERROR``.
        """

        if self._status is not PeerStatus.CONNECTED:
            return self._status

        if self.poll(PollDirection.IN, 0) is PollResult.READY:
            if self.get_available_bytes() == 0:
                self._logger.info(
                    "UnixStreamPeer.get_status(self) :: remote_closed",
                    path=self._peer_path,
                )
                self.close()
                return self._status

        result = self.poll(PollDirection.IN_OUT, 0)
        if result not in (PollResult.READY, PollResult.BUSY):
            self._logger.warning(
                "UnixStreamPeer.get_status(self) :: poll_failed",
                path=self._peer_path,
            )
            self._fail(PeerStatus.ERROR)
        return self._status

    # Write

    def _write(self, data) -> int | None:
        """Issue one ``send``; ``None`` means the lazy connect left nothing to send to."""

        if self._status is not PeerStatus.CONNECTED:
            if self._status is PeerStatus.ERROR or self._pending_path is None:
                raise PeerNotConnectedError(
                    f"Cannot write while peer status is {self._status.name}"
                )
            self._connect_pending()
            if self._status is not PeerStatus.CONNECTED:
                return None

        try:
            sent = self._handle.send(data)
        except OSError as exc:
            path = self._peer_path
            self._logger.error(
                "UnixStreamPeer._write(data) :: send_failed",
                path=path,
                errno=exc.errno,
                error=exc.strerror or str(exc),
            )
            self._fail(PeerStatus.ERROR)
            raise PeerIOError(
                f"Write to {path} failed: {exc.strerror or exc}", path=path
            ) from exc
        return sent

    def put_data(self, data) -> None:
        """Send ``data``; raise unless the kernel accepted every byte."""

        expected = memoryview(data).nbytes
        sent = self._write(data)
        if sent is not None and sent < expected:
            raise PeerShortWriteError(
                f"Only {sent} of {expected} bytes were accepted",
                sent=sent,
                path=self._peer_path,
            )

    def put_partial_data(self, data) -> int:
        """Send ``data`` and return how many bytes the kernel accepted."""

        sent = self._write(data)
        return 0 if sent is None else sent

    # Read

    def _read(self, capacity: int) -> bytes:
        if capacity < 0:
            raise ValueError(f"capacity must be non-negative, got {capacity}")
        if not self.is_connected():
            raise PeerNotConnectedError(
                f"Cannot read while peer status is {self._status.name}"
            )
        if capacity == 0:
            return b""

        path = self._peer_path
        try:
            data = self._handle.recv(capacity)
        except OSError as exc:
            self._logger.error(
                "UnixStreamPeer._read(capacity) :: recv_failed",
                path=path,
                errno=exc.errno,
                error=exc.strerror or str(exc),
            )
            self._fail(PeerStatus.ERROR)
            raise PeerIOError(
                f"Read from {path} failed: {exc.strerror or exc}", path=path
            ) from exc

        if not data:
            self._logger.info("UnixStreamPeer._read(capacity) :: end_of_stream", path=path)
            self.close()
            raise PeerEndOfStream(f"Peer at {path} closed the stream", path=path)
        return data

    def get_data(self, capacity: int) -> bytes:
        """Receive ``capacity`` bytes in a single call or raise.

        Raises:
            PeerShortReadError: Fewer bytes arrived; they are kept on ``.data``.
            PeerEndOfStream: The remote end closed the stream.
            PeerIOError: The receive failed or the peer is not connected.
        """

        data = self._read(capacity)
        if len(data) < capacity:
            raise PeerShortReadError(
                f"Received {len(data)} of {capacity} bytes",
                data=data,
                path=self._peer_path,
            )
        return data

    def get_partial_data(self, capacity: int) -> tuple[bytes, int]:
        """Receive up to ``capacity`` bytes and return them with their count."""

        data = self._read(capacity)
        return data, len(data)


__all__ = ["UnixStreamPeer"]
