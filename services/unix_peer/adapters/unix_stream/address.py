"""Validation of filesystem paths used as Unix socket addresses."""

from __future__ import annotations

import os

from services.unix_peer.ports import PathArg, PeerAddressError, PeerNotFoundError

# sockaddr_un.sun_path is 108 bytes on Linux, one of which is the terminator.
SUN_PATH_SIZE = 108
MAX_PATH_BYTES = SUN_PATH_SIZE - 1


def encode_path(path: PathArg) -> bytes:
    """Return ``path`` encoded with the filesystem encoding.

    Raises:
        PeerAddressError: If the path is empty, contains NUL bytes, starts with
            a NUL (abstract namespace) or does not fit in ``sun_path``.
    """

    try:
        encoded = os.fsencode(path)
    except (TypeError, UnicodeError) as exc:
        raise PeerAddressError(f"Unusable socket path {path!r}: {exc}") from exc

    text = os.fsdecode(encoded)
    if not encoded:
        raise PeerAddressError("Socket path must not be empty")
    if b"\x00" in encoded:
        raise PeerAddressError(
            "Socket path must not contain NUL bytes", path=text
        )
    if len(encoded) > MAX_PATH_BYTES:
        raise PeerAddressError(
            f"Socket path is {len(encoded)} bytes; the limit is {MAX_PATH_BYTES}",
            path=text,
        )
    return encoded


def resolve_socket_path(path: PathArg) -> str:
    """Validate ``path`` and check that it exists before connecting.

    Args:
        path: Filesystem path of the listening socket.

    Returns:
        The path as a ``str`` suitable for :meth:`socket.socket.connect`.

    Raises:
        PeerAddressError: If the path fails length or content validation.
        PeerNotFoundError: If nothing exists at the path.
    """

    encoded = encode_path(path)
    text = os.fsdecode(encoded)
    try:
        os.stat(encoded)
    except FileNotFoundError as exc:
        raise PeerNotFoundError(
            f"Socket path {text} does not exist", path=text, errno=exc.errno
        ) from exc
    except OSError as exc:
        raise PeerNotFoundError(
            f"Socket path {text} cannot be inspected: {exc.strerror}",
            path=text,
            errno=exc.errno,
        ) from exc
    return text


__all__ = ["SUN_PATH_SIZE", "MAX_PATH_BYTES", "encode_path", "resolve_socket_path"]
