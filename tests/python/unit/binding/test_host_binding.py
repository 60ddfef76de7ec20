from __future__ import annotations

import pytest

from services.unix_peer.adapters.binding import EXPORTED_METHODS, ErrorCode, HostBinding
from services.unix_peer.adapters.binding.host import error_code_for
from services.unix_peer.ports import (
    PeerAddressError,
    PeerConnectionError,
    PeerEndOfStream,
    PeerIOError,
    PeerNotFoundError,
    PeerShortReadError,
    PeerStatus,
    StreamPeer,
)


class StubPeer:
    def __init__(self) -> None:
        self.raise_on: dict[str, Exception] = {}
        self.calls: list[tuple[str, tuple]] = []

    def _record(self, name: str, *args):
        self.calls.append((name, args))
        if name in self.raise_on:
            raise self.raise_on[name]

    def open(self, path):
        self._record("open", path)

    def close(self):
        self._record("close")

    def is_connected_to_path(self):
        self._record("is_connected_to_path")
        return True

    def get_status(self):
        self._record("get_status")
        return PeerStatus.CONNECTED

    def get_connected_path(self):
        self._record("get_connected_path")
        return "/tmp/daemon.sock"

    def get_available_bytes(self):
        self._record("get_available_bytes")
        return 7

    def put_data(self, data):
        self._record("put_data", data)

    def put_partial_data(self, data):
        self._record("put_partial_data", data)
        return len(data)

    def get_data(self, capacity):
        self._record("get_data", capacity)
        return b"x" * capacity

    def get_partial_data(self, capacity):
        self._record("get_partial_data", capacity)
        return b"ok", 2


def test_methods_export_the_peer_surface() -> None:
    binding = HostBinding(StubPeer())

    assert set(binding.methods()) == set(EXPORTED_METHODS)
    assert binding.class_name == "StreamPeerUnix"


def test_stream_peer_protocol_declares_every_exported_method() -> None:
    missing = [name for name in EXPORTED_METHODS if not callable(getattr(StreamPeer, name, None))]

    assert missing == []


def test_constants_mirror_status_enum() -> None:
    assert HostBinding.constants() == {
        "STATUS_NONE": 0,
        "STATUS_CONNECTED": 1,
        "STATUS_ERROR": 2,
    }


def test_call_returns_ok_with_value_and_converts_status() -> None:
    peer = StubPeer()
    binding = HostBinding(peer)

    assert binding.call("put_partial_data", b"PING") == (ErrorCode.OK, 4)
    assert binding.call("get_status") == (ErrorCode.OK, 1)
    assert binding.call("open", "/tmp/daemon.sock") == (ErrorCode.OK, None)
    assert peer.calls[-1] == ("open", ("/tmp/daemon.sock",))


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (PeerNotFoundError("missing"), ErrorCode.ERR_FILE_NOT_FOUND),
        (PeerAddressError("too long"), ErrorCode.ERR_INVALID_PARAMETER),
        (PeerConnectionError("refused"), ErrorCode.ERR_CONNECTION_ERROR),
        (PeerEndOfStream("eof"), ErrorCode.ERR_FILE_EOF),
        (PeerIOError("broken"), ErrorCode.FAILED),
        (ValueError("negative"), ErrorCode.ERR_INVALID_PARAMETER),
    ],
)
def test_call_maps_errors_to_codes(error: Exception, code: ErrorCode) -> None:
    peer = StubPeer()
    peer.raise_on["open"] = error

    assert HostBinding(peer).call("open", "/tmp/daemon.sock") == (code, None)


def test_call_returns_partial_bytes_for_short_reads() -> None:
    peer = StubPeer()
    peer.raise_on["get_data"] = PeerShortReadError("short", data=b"ab")

    assert HostBinding(peer).call("get_data", 4) == (ErrorCode.FAILED, b"ab")


def test_call_reports_zero_count_at_end_of_stream() -> None:
    peer = StubPeer()
    peer.raise_on["get_partial_data"] = PeerEndOfStream("closed")

    assert HostBinding(peer).call("get_partial_data", 16) == (
        ErrorCode.ERR_FILE_EOF,
        (b"", 0),
    )


def test_call_rejects_unknown_methods() -> None:
    assert HostBinding(StubPeer()).call("bind", "/tmp/x") == (
        ErrorCode.ERR_METHOD_NOT_FOUND,
        None,
    )


def test_unexpected_errors_propagate() -> None:
    peer = StubPeer()
    peer.raise_on["close"] = KeyError("bug")

    with pytest.raises(KeyError):
        HostBinding(peer).call("close")


def test_error_code_for_defaults_to_failed() -> None:
    assert error_code_for(RuntimeError("other")) is ErrorCode.FAILED
