"""Fixtures shared across python test suites."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

import pytest

from services.unix_peer.adapters.unix_stream import UnixStreamPeer
from tests.python.helpers.unix_server import UnixTestServer


@pytest.fixture
def socket_dir() -> Path:
    """Provide a short directory for socket files.

    ``tmp_path`` can exceed the 107-byte ``sun_path`` limit for long test names.
    """

    path = Path(tempfile.mkdtemp(prefix="upeer-", dir="/tmp"))
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def unix_server(socket_dir: Path) -> UnixTestServer:
    """Provide a listening Unix socket server."""

    server = UnixTestServer(socket_dir / "daemon.sock")
    yield server
    server.close()


@pytest.fixture
def peer() -> UnixStreamPeer:
    """Provide a fresh peer that is closed after the test."""

    instance = UnixStreamPeer()
    yield instance
    instance.close()


@pytest.fixture
def connected(peer: UnixStreamPeer, unix_server: UnixTestServer):
    """Provide a connected peer together with the accepted server-side socket."""

    peer.open(unix_server.path)
    conn = unix_server.accept()
    return peer, conn
