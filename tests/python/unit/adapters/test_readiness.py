from __future__ import annotations

import socket

import pytest

from services.unix_peer.adapters.unix_stream.readiness import available_bytes, poll_handle
from services.unix_peer.ports import PollDirection, PollResult


@pytest.fixture
def pair():
    left, right = socket.socketpair(socket.AF_UNIX, socket.SOCK_STREAM)
    yield left, right
    left.close()
    right.close()


def test_poll_in_is_busy_without_data(pair) -> None:
    left, _ = pair

    assert poll_handle(left, PollDirection.IN, 0) is PollResult.BUSY


def test_poll_in_is_ready_after_data_arrives(pair) -> None:
    left, right = pair
    right.sendall(b"x")

    assert poll_handle(left, PollDirection.IN, 100) is PollResult.READY


def test_poll_out_is_ready_on_fresh_socket(pair) -> None:
    left, _ = pair

    assert poll_handle(left, PollDirection.OUT, 0) is PollResult.READY
    assert poll_handle(left, PollDirection.IN_OUT, 0) is PollResult.READY


def test_poll_in_is_ready_after_remote_close(pair) -> None:
    left, right = pair
    right.close()

    assert poll_handle(left, PollDirection.IN, 100) is PollResult.READY
    assert available_bytes(left) == 0


def test_poll_fails_on_released_handle(pair) -> None:
    left, _ = pair
    left.close()

    assert poll_handle(left, PollDirection.IN_OUT, 0) is PollResult.FAILED


def test_available_bytes_does_not_consume(pair) -> None:
    left, right = pair
    right.sendall(b"hello")
    assert poll_handle(left, PollDirection.IN, 500) is PollResult.READY

    assert available_bytes(left) == 5
    assert available_bytes(left) == 5
    assert left.recv(16) == b"hello"
    assert available_bytes(left) == 0


def test_available_bytes_reports_failure_on_released_handle(pair) -> None:
    left, _ = pair
    left.close()

    assert available_bytes(left) == -1
