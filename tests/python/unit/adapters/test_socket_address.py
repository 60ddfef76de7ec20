from __future__ import annotations

import os
from pathlib import Path

import pytest

from services.unix_peer.adapters.unix_stream.address import (
    MAX_PATH_BYTES,
    SUN_PATH_SIZE,
    encode_path,
    resolve_socket_path,
)
from services.unix_peer.ports import PeerAddressError, PeerNotFoundError


def test_limits_match_sockaddr_un() -> None:
    assert SUN_PATH_SIZE == 108
    assert MAX_PATH_BYTES == 107


def test_encode_path_accepts_path_at_limit() -> None:
    path = "/" + "a" * (MAX_PATH_BYTES - 1)

    assert encode_path(path) == path.encode()


@pytest.mark.parametrize("extra", [1, 2, 200])
def test_encode_path_rejects_paths_over_limit(extra: int) -> None:
    path = "/" + "a" * (MAX_PATH_BYTES - 1 + extra)

    with pytest.raises(PeerAddressError) as excinfo:
        encode_path(path)

    assert excinfo.value.code == "address_invalid"
    assert str(MAX_PATH_BYTES) in excinfo.value.message


def test_encode_path_counts_bytes_not_characters() -> None:
    path = "/" + "é" * 60

    with pytest.raises(PeerAddressError):
        encode_path(path)


@pytest.mark.parametrize("path", ["", "\x00abstract", "/tmp/a\x00b"])
def test_encode_path_rejects_empty_and_nul(path: str) -> None:
    with pytest.raises(PeerAddressError):
        encode_path(path)


def test_resolve_socket_path_reports_missing_path(socket_dir: Path) -> None:
    missing = socket_dir / "missing.sock"

    with pytest.raises(PeerNotFoundError) as excinfo:
        resolve_socket_path(missing)

    assert excinfo.value.path == str(missing)
    assert excinfo.value.code == "path_not_found"


def test_resolve_socket_path_validates_length_before_stat(monkeypatch) -> None:
    calls: list[object] = []
    monkeypatch.setattr(os, "stat", lambda path: calls.append(path))

    with pytest.raises(PeerAddressError):
        resolve_socket_path("/" + "x" * 300)

    assert calls == []


def test_resolve_socket_path_returns_text_for_existing_entry(socket_dir: Path) -> None:
    existing = socket_dir / "present"
    existing.write_bytes(b"")

    assert resolve_socket_path(existing) == str(existing)
