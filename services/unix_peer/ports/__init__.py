"""Port protocols and value types for stream peers."""

from .stream_peer import (
    PathArg,
    PeerAddressError,
    PeerConnectionError,
    PeerEndOfStream,
    PeerIOError,
    PeerNotConnectedError,
    PeerNotFoundError,
    PeerShortReadError,
    PeerShortWriteError,
    PeerStatus,
    PollDirection,
    PollResult,
    StreamPeer,
    StreamPeerError,
)

__all__ = [
    "PathArg",
    "PeerStatus",
    "PollDirection",
    "PollResult",
    "StreamPeer",
    "StreamPeerError",
    "PeerConnectionError",
    "PeerAddressError",
    "PeerNotFoundError",
    "PeerIOError",
    "PeerNotConnectedError",
    "PeerShortWriteError",
    "PeerShortReadError",
    "PeerEndOfStream",
]
