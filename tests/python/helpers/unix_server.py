"""Listening Unix socket helpers for stream peer tests."""

from __future__ import annotations

import socket
import threading
from pathlib import Path


class UnixTestServer:
    """Bind and listen on ``path``; connections wait in the backlog until accepted.

    ``connect`` on an ``AF_UNIX`` stream socket completes once the connection is
    queued, so tests can open a peer first and accept afterwards.
    """

    def __init__(self, path: Path, *, backlog: int = 4) -> None:
        self.path = path
        self._listener = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._listener.bind(str(path))
        self._listener.listen(backlog)
        self._connections: list[socket.socket] = []

    def accept(self, timeout: float = 2.0) -> socket.socket:
        """Return the next queued connection."""

        self._listener.settimeout(timeout)
        conn, _ = self._listener.accept()
        conn.settimeout(timeout)
        self._connections.append(conn)
        return conn

    def stop_listening(self) -> None:
        """Close the listener but leave the socket file in place."""

        self._listener.close()

    def close(self) -> None:
        for conn in self._connections:
            conn.close()
        self._connections.clear()
        self._listener.close()
        if self.path.exists():
            self.path.unlink()


def recv_exactly(conn: socket.socket, size: int) -> bytes:
    """Read ``size`` bytes from a plain socket."""

    chunks: list[bytes] = []
    remaining = size
    while remaining:
        chunk = conn.recv(min(remaining, 65536))
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class BackgroundReader(threading.Thread):
    """Drain ``size`` bytes from ``conn`` on a worker thread."""

    def __init__(self, conn: socket.socket, size: int) -> None:
        super().__init__(name="unix-test-reader", daemon=True)
        self._conn = conn
        self._size = size
        self.data = b""

    def run(self) -> None:
        self.data = recv_exactly(self._conn, self._size)


__all__ = ["UnixTestServer", "recv_exactly", "BackgroundReader"]
