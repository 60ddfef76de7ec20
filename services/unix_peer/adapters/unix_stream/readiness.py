"""Readiness polling and queued-byte queries on socket handles."""

from __future__ import annotations

import fcntl
import select
import socket
import struct
import termios

from services.unix_peer.ports import PollDirection, PollResult
from services.unix_peer.telemetry import get_logger

LOGGER = get_logger("unix_peer.adapters.unix_stream.readiness")

_POLL_MASKS = {
    PollDirection.IN: select.POLLIN,
    PollDirection.OUT: select.POLLOUT,
    PollDirection.IN_OUT: select.POLLIN | select.POLLOUT,
}
_FAILURE_EVENTS = select.POLLERR | select.POLLNVAL
_INT = struct.Struct("i")


def poll_handle(
    handle: socket.socket, direction: PollDirection, timeout_ms: int
) -> PollResult:
    """Wait up to ``timeout_ms`` for ``handle`` to become ready.

    Args:
        handle: Socket to watch. A released socket reports ``FAILED``.
        direction: Whether to wait for readability, writability, or either.
        timeout_ms: Milliseconds to wait; ``0`` returns immediately and a
            negative value waits indefinitely.

    Returns:
        ``READY`` when an event fired, ``BUSY`` on timeout, ``FAILED`` when the
        poll itself failed or the kernel flagged an error on the handle.
    """

    fd = handle.fileno()
    if fd < 0:
        LOGGER.debug("readiness.poll_handle(handle, direction, timeout_ms) :: released")
        return PollResult.FAILED

    poller = select.poll()
    poller.register(fd, _POLL_MASKS[direction])
    try:
        events = poller.poll(None if timeout_ms < 0 else timeout_ms)
    except OSError as exc:
        LOGGER.debug(
            "readiness.poll_handle(handle, direction, timeout_ms) :: poll_failed",
            fd=fd,
            error=str(exc),
        )
        return PollResult.FAILED

    if not events:
        return PollResult.BUSY

    revents = 0
    for _, mask in events:
        revents |= mask
    if revents & _FAILURE_EVENTS:
        LOGGER.debug(
            "readiness.poll_handle(handle, direction, timeout_ms) :: error_event",
            fd=fd,
            revents=revents,
        )
        return PollResult.FAILED
    return PollResult.READY


def available_bytes(handle: socket.socket) -> int:
    """Return the number of bytes queued for reading without consuming them.

    Returns:
        The queued byte count, or ``-1`` when the ``FIONREAD`` query fails.
    """

    fd = handle.fileno()
    if fd < 0:
        LOGGER.debug("readiness.available_bytes(handle) :: released")
        return -1
    try:
        raw = fcntl.ioctl(fd, termios.FIONREAD, _INT.pack(0))
    except OSError as exc:
        LOGGER.warning(
            "readiness.available_bytes(handle) :: ioctl_failed",
            fd=fd,
            error=str(exc),
        )
        return -1
    return _INT.unpack(raw)[0]


__all__ = ["poll_handle", "available_bytes"]
