"""Call-site loops that move whole buffers over single-shot stream peers."""

from __future__ import annotations

from services.unix_peer.ports import (
    PeerEndOfStream,
    PeerIOError,
    PollDirection,
    PollResult,
    StreamPeer,
)
from services.unix_peer.telemetry import get_logger

LOGGER = get_logger("unix_peer.application.session")


def _wait(peer: StreamPeer, direction: PollDirection, timeout_ms: int | None) -> bool:
    """Return ``False`` when ``timeout_ms`` elapsed without readiness."""

    result = peer.poll(direction, -1 if timeout_ms is None else timeout_ms)
    if result is PollResult.FAILED:
        path = peer.get_connected_path()
        raise PeerIOError(f"Polling {path or 'peer'} for {direction.value} failed", path=path)
    return result is PollResult.READY


def send_all(peer: StreamPeer, data, *, timeout_ms: int | None = None) -> int:
    """Write every byte of ``data``, waiting for buffer space between short writes.

    Args:
        peer: Connected (or lazily connecting) peer.
        data: Bytes-like payload.
        timeout_ms: Longest wait for writability between short writes;
            ``None`` waits indefinitely.

    Returns:
        Number of bytes written, always ``len(data)``.

    Raises:
        PeerIOError: A write failed or the peer stayed unwritable past the timeout.
    """

    view = memoryview(data).cast("B")
    total = peer.put_partial_data(view)
    while total < len(view):
        if not _wait(peer, PollDirection.OUT, timeout_ms):
            path = peer.get_connected_path()
            raise PeerIOError(
                f"Timed out after writing {total} of {len(view)} bytes", path=path
            )
        total += peer.put_partial_data(view[total:])
    LOGGER.debug("session.send_all(peer, data, timeout_ms) :: sent", bytes=total)
    return total


def receive_exactly(
    peer: StreamPeer,
    size: int,
    *,
    chunk_size: int = 65536,
    timeout_ms: int | None = None,
) -> bytes:
    """Read exactly ``size`` bytes, looping over partial reads.

    Raises:
        PeerEndOfStream: The stream ended before ``size`` bytes arrived.
        PeerIOError: A read failed or no data arrived within ``timeout_ms``.
    """

    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        if timeout_ms is not None and not _wait(peer, PollDirection.IN, timeout_ms):
            path = peer.get_connected_path()
            raise PeerIOError(
                f"Timed out after reading {size - remaining} of {size} bytes", path=path
            )
        data, received = peer.get_partial_data(min(chunk_size, remaining))
        chunks.append(data)
        remaining -= received
    return b"".join(chunks)


def receive_until_eof(
    peer: StreamPeer,
    *,
    chunk_size: int = 65536,
    timeout_ms: int | None = None,
) -> bytes:
    """Read until the remote end closes the stream.

    When ``timeout_ms`` is given, reading also stops once no data arrives for
    that long; the peer then stays connected.
    """

    chunks: list[bytes] = []
    while True:
        if timeout_ms is not None and not _wait(peer, PollDirection.IN, timeout_ms):
            LOGGER.debug(
                "session.receive_until_eof(peer, chunk_size, timeout_ms) :: idle",
                received=sum(len(chunk) for chunk in chunks),
            )
            break
        try:
            data, _ = peer.get_partial_data(chunk_size)
        except PeerEndOfStream:
            break
        chunks.append(data)
    return b"".join(chunks)


__all__ = ["send_all", "receive_exactly", "receive_until_eof"]
