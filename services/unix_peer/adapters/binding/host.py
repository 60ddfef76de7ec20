"""Adapter exposing a stream peer to reflection-based host runtimes.

Scripting hosts cannot catch Python exceptions, so :meth:`HostBinding.call`
turns every peer error into an :class:`ErrorCode` paired with the method's
return value.
"""

from __future__ import annotations

import enum
from typing import Any, Callable

from services.unix_peer.ports import (
    PeerAddressError,
    PeerConnectionError,
    PeerEndOfStream,
    PeerNotFoundError,
    PeerStatus,
    StreamPeer,
    StreamPeerError,
)
from services.unix_peer.telemetry import get_logger

LOGGER = get_logger("unix_peer.adapters.binding.host")

EXPORTED_METHODS = (
    "open",
    "is_connected_to_path",
    "get_status",
    "get_connected_path",
    "close",
    "get_available_bytes",
    "put_data",
    "put_partial_data",
    "get_data",
    "get_partial_data",
)


class ErrorCode(enum.IntEnum):
    """Result codes handed to host runtimes."""

    OK = 0
    FAILED = 1
    ERR_FILE_EOF = 2
    ERR_FILE_NOT_FOUND = 3
    ERR_CONNECTION_ERROR = 4
    ERR_INVALID_PARAMETER = 5
    ERR_METHOD_NOT_FOUND = 6


# Most specific classes first.
_ERROR_CODES: tuple[tuple[type[BaseException], ErrorCode], ...] = (
    (PeerNotFoundError, ErrorCode.ERR_FILE_NOT_FOUND),
    (PeerAddressError, ErrorCode.ERR_INVALID_PARAMETER),
    (PeerConnectionError, ErrorCode.ERR_CONNECTION_ERROR),
    (PeerEndOfStream, ErrorCode.ERR_FILE_EOF),
    (StreamPeerError, ErrorCode.FAILED),
    (ValueError, ErrorCode.ERR_INVALID_PARAMETER),
    (TypeError, ErrorCode.ERR_INVALID_PARAMETER),
)


def error_code_for(exc: BaseException) -> ErrorCode:
    """Return the :class:`ErrorCode` matching ``exc``."""

    for exc_type, code in _ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    return ErrorCode.FAILED


class HostBinding:
    """Translate the stream peer method surface into host calls.

    Args:
        peer: Peer instance receiving the calls.
        class_name: Name the host registers the peer class under.
    """

    def __init__(self, peer: StreamPeer, *, class_name: str = "StreamPeerUnix") -> None:
        self._peer = peer
        self.class_name = class_name

    def methods(self) -> dict[str, Callable[..., Any]]:
        """Return the exported method names mapped to bound callables."""

        return {name: getattr(self._peer, name) for name in EXPORTED_METHODS}

    @staticmethod
    def constants() -> dict[str, int]:
        """Return the status enum as host-visible integer constants."""

        return {f"STATUS_{status.name}": int(status) for status in PeerStatus}

    def call(self, method: str, *args: Any) -> tuple[ErrorCode, Any]:
        """Invoke ``method`` on the peer and report ``(code, value)``.

        ``value`` is the method's return value on success and ``None`` on
        failure. Short reads return the partial bytes, and end of stream on
        ``get_partial_data`` returns an empty buffer with a zero count.
        """

        target = self.methods().get(method)
        if target is None:
            LOGGER.warning("HostBinding.call(method, *args) :: unknown_method", method=method)
            return ErrorCode.ERR_METHOD_NOT_FOUND, None

        try:
            value = target(*args)
        except (StreamPeerError, ValueError, TypeError) as exc:
            code = error_code_for(exc)
            LOGGER.debug(
                "HostBinding.call(method, *args) :: failed",
                method=method,
                code=code.name,
                error=str(exc),
            )
            if isinstance(exc, PeerEndOfStream) and method == "get_partial_data":
                return code, (b"", 0)
            return code, getattr(exc, "data", None)

        if isinstance(value, PeerStatus):
            value = int(value)
        return ErrorCode.OK, value


__all__ = ["EXPORTED_METHODS", "ErrorCode", "HostBinding", "error_code_for"]
