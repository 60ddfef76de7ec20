"""Unix domain socket stream peer adapter."""

from .address import MAX_PATH_BYTES, SUN_PATH_SIZE, encode_path, resolve_socket_path
from .peer import UnixStreamPeer
from .readiness import available_bytes, poll_handle

__all__ = [
    "UnixStreamPeer",
    "MAX_PATH_BYTES",
    "SUN_PATH_SIZE",
    "encode_path",
    "resolve_socket_path",
    "available_bytes",
    "poll_handle",
]
