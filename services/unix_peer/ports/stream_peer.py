"""Port definitions for byte-stream peers."""

from __future__ import annotations

import enum
import os
from typing import Any, Protocol, Union

PathArg = Union[str, os.PathLike]


class PeerStatus(enum.IntEnum):
    """Connection state reported by a stream peer."""

    NONE = 0
    CONNECTED = 1
    ERROR = 2


class PollDirection(enum.Enum):
    """Readiness direction to wait for."""

    IN = "in"
    OUT = "out"
    IN_OUT = "in_out"


class PollResult(enum.Enum):
    """Outcome of a readiness poll. ``BUSY`` is a timeout, not a failure."""

    READY = "ready"
    BUSY = "busy"
    FAILED = "failed"


class StreamPeerError(RuntimeError):
    """Base error raised by stream peers.

    Args:
        message: Human-readable description.
        code: Stable machine-readable identifier.
        path: Socket path involved, when known.
    """

    default_code = "stream_peer_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.path = path

    def to_payload(self) -> dict[str, Any]:
        """Convert the error into a JSON-serializable mapping."""

        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.path:
            payload["path"] = self.path
        return payload


class PeerConnectionError(StreamPeerError):
    """Raised when a connection cannot be established."""

    default_code = "connection_failed"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        path: str | None = None,
        errno: int | None = None,
    ) -> None:
        super().__init__(message, code=code, path=path)
        self.errno = errno

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.errno is not None:
            payload["errno"] = self.errno
        return payload


class PeerAddressError(PeerConnectionError):
    """Raised when a path cannot be used as a Unix socket address."""

    default_code = "address_invalid"


class PeerNotFoundError(PeerConnectionError):
    """Raised when the socket path does not exist on the filesystem."""

    default_code = "path_not_found"


class PeerIOError(StreamPeerError):
    """Raised when a read or write fails."""

    default_code = "io_failed"


class PeerNotConnectedError(PeerIOError):
    """Raised when I/O is attempted on a peer that is not connected."""

    default_code = "not_connected"


class PeerShortWriteError(PeerIOError):
    """Raised by ``put_data`` when the OS accepted fewer bytes than requested."""

    default_code = "short_write"

    def __init__(self, message: str, *, sent: int, path: str | None = None) -> None:
        super().__init__(message, path=path)
        self.sent = sent


class PeerShortReadError(PeerIOError):
    """Raised by ``get_data`` when a single receive did not fill the request.

    The bytes that did arrive are kept on :attr:`data`.
    """

    default_code = "short_read"

    def __init__(self, message: str, *, data: bytes, path: str | None = None) -> None:
        super().__init__(message, path=path)
        self.data = data


class PeerEndOfStream(StreamPeerError):
    """Raised when the remote end closed the stream in an orderly way."""

    default_code = "end_of_stream"


class StreamPeer(Protocol):
    """Protocol describing the byte-stream peer surface."""

    def open(self, path: PathArg) -> None:
        """Connect to ``path``."""

    def close(self) -> None:
        """Release the connection; safe to call repeatedly."""

    def is_connected(self) -> bool:
        """Return whether the cached status is ``CONNECTED``."""

    def is_connected_to_path(self) -> bool:
        """Alias of :meth:`is_connected` under the host-visible name."""

    def get_status(self) -> PeerStatus:
        """Refresh and return the connection status."""

    def get_connected_path(self) -> str:
        """Return the connected path or an empty string."""

    def poll(self, direction: PollDirection, timeout_ms: int = 0) -> PollResult:
        """Wait up to ``timeout_ms`` for readiness in ``direction``."""

    def get_available_bytes(self) -> int:
        """Return the number of bytes queued for reading, ``-1`` on failure."""

    def put_data(self, data: bytes) -> None:
        """Send ``data``, failing unless every byte was accepted."""

    def put_partial_data(self, data: bytes) -> int:
        """Send ``data`` and return the accepted byte count."""

    def get_data(self, capacity: int) -> bytes:
        """Receive exactly ``capacity`` bytes in one call or fail."""

    def get_partial_data(self, capacity: int) -> tuple[bytes, int]:
        """Receive up to ``capacity`` bytes."""


__all__ = [
    "PathArg",
    "PeerStatus",
    "PollDirection",
    "PollResult",
    "StreamPeerError",
    "PeerConnectionError",
    "PeerAddressError",
    "PeerNotFoundError",
    "PeerIOError",
    "PeerNotConnectedError",
    "PeerShortWriteError",
    "PeerShortReadError",
    "PeerEndOfStream",
    "StreamPeer",
]
