"""CLI entrypoint that talks to a local daemon over a Unix domain socket.

The client resolves settings, configures structured logging on stderr,
optionally enables deep tracing, connects to the socket, sends a payload, and
copies whatever comes back to stdout until the daemon closes the stream or
stays quiet for the read timeout. Example::

    python -m services.unix_peer.main \
        --socket /run/example/daemon.sock \
        --send 'PING' \
        --read-timeout-ms 500
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import IO, Any, Sequence

from services.unix_peer.adapters.observability import configure_structlog
from services.unix_peer.adapters.unix_stream import UnixStreamPeer
from services.unix_peer.application import (
    PeerSettings,
    SettingsError,
    load_settings,
    receive_until_eof,
    send_all,
)
from services.unix_peer.ports import PeerConnectionError, PeerIOError
from services.unix_peer.telemetry import TraceController, get_logger, trace_section

LOGGER = get_logger("unix_peer.cli")

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_CONNECTION_ERROR = 3
EXIT_IO_ERROR = 4


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the peer client.

    Example:
        >>> parse_args(['--socket', '/tmp/daemon.sock'])  # doctest: +ELLIPSIS
        Namespace(...)
    """

    parser = argparse.ArgumentParser(
        prog="unix-peer",
        description="Exchange bytes with a local daemon over a Unix domain socket.",
    )
    parser.add_argument("--socket", help="Filesystem path of the listening Unix socket.")
    parser.add_argument("--config", help="YAML file with a 'peer' settings mapping.")
    payload = parser.add_mutually_exclusive_group()
    payload.add_argument("--send", help="Text payload to send after connecting.")
    payload.add_argument(
        "--stdin",
        action="store_true",
        help="Send everything read from standard input after connecting.",
    )
    parser.add_argument(
        "--read-timeout-ms",
        type=int,
        help="Stop reading after this many milliseconds without data.",
    )
    parser.add_argument(
        "--write-timeout-ms",
        type=int,
        help="Give up when the socket stays unwritable for this long.",
    )
    parser.add_argument("--chunk-size", type=int, help="Bytes requested per read.")
    parser.add_argument(
        "--lazy",
        dest="lazy_connect",
        action="store_const",
        const=True,
        default=None,
        help="Defer connecting until the payload is written.",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Print the refreshed connection status and queued byte count, then exit.",
    )
    parser.add_argument(
        "--trace",
        dest="trace",
        action="store_const",
        const=True,
        default=None,
        help="Enable deep tracing of peer calls.",
    )
    parser.add_argument(
        "--no-trace",
        dest="trace",
        action="store_const",
        const=False,
        help="Disable tracing even if the config file enables it.",
    )
    parser.add_argument(
        "--log-level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Override the logging level.",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        help="Render logs as JSON lines or human-readable console output.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def build_settings(args: argparse.Namespace) -> PeerSettings:
    """Combine CLI overrides with the config file and environment."""

    overrides: dict[str, Any] = {
        "socket": args.socket,
        "lazy_connect": args.lazy_connect,
        "read_timeout_ms": args.read_timeout_ms,
        "write_timeout_ms": args.write_timeout_ms,
        "chunk_size": args.chunk_size,
        "log_level": args.log_level,
        "log_format": args.log_format,
        "trace": args.trace,
    }
    config_path = Path(args.config).expanduser() if args.config else None
    return load_settings(config_path=config_path, overrides=overrides)


def _read_payload(args: argparse.Namespace, stdin: IO[bytes]) -> bytes | None:
    if args.send is not None:
        return args.send.encode("utf-8")
    if args.stdin:
        return stdin.read()
    return None


def run_session(
    settings: PeerSettings,
    *,
    payload: bytes | None,
    status_only: bool,
    stdout: IO[bytes],
) -> int:
    """Connect, exchange bytes, and return the process exit code."""

    metadata = {"socket": str(settings.socket_path), "lazy": settings.lazy_connect}
    with trace_section("unix_peer.session", logger=LOGGER, metadata=metadata) as section:
        peer = UnixStreamPeer(settings.socket_path if settings.lazy_connect else None)
        section.attach(peer)
        with peer:
            try:
                if not (settings.lazy_connect and payload):
                    peer.open(settings.socket_path)
                section.debug("connected")

                if status_only:
                    status = peer.get_status()
                    line = f"{status.name} {peer.get_available_bytes()}\n"
                    stdout.write(line.encode("ascii"))
                    stdout.flush()
                    return EXIT_OK

                if payload:
                    sent = send_all(peer, payload, timeout_ms=settings.write_timeout_ms)
                    section.sent(sent)

                received = receive_until_eof(
                    peer,
                    chunk_size=settings.chunk_size,
                    timeout_ms=settings.read_timeout_ms,
                )
                section.received(len(received))
            except PeerConnectionError as exc:
                LOGGER.error(
                    "UnixPeerCli.run_session(settings) :: connection_error",
                    **exc.to_payload(),
                )
                return EXIT_CONNECTION_ERROR
            except PeerIOError as exc:
                LOGGER.error("UnixPeerCli.run_session(settings) :: io_error", **exc.to_payload())
                return EXIT_IO_ERROR

        stdout.write(received)
        stdout.flush()
    return EXIT_OK


def main(
    argv: Sequence[str] | None = None,
    *,
    stdin: IO[bytes] | None = None,
    stdout: IO[bytes] | None = None,
) -> int:
    """Entry point invoked by ``unix-peer`` and ``python -m services.unix_peer.main``.

    Returns:
        Process exit code where ``0`` indicates success.
    """

    args = parse_args(argv)
    try:
        settings = build_settings(args)
    except SettingsError as exc:
        print(f"unix-peer error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_structlog(
        service_name="unix-peer",
        log_level=getattr(logging, settings.log_level, logging.INFO),
        log_format=settings.log_format,
    )
    LOGGER.info(
        "UnixPeerCli.main(argv) :: configuration_loaded",
        socket=str(settings.socket_path),
        read_timeout_ms=settings.read_timeout_ms,
        chunk_size=settings.chunk_size,
        log_level=settings.log_level,
    )

    payload = _read_payload(args, stdin or sys.stdin.buffer)
    trace_controller = TraceController(trace_returns=settings.log_level == "DEBUG")
    if settings.trace:
        trace_controller.enable()
    try:
        return run_session(
            settings,
            payload=payload,
            status_only=args.status,
            stdout=stdout or sys.stdout.buffer,
        )
    except KeyboardInterrupt:
        LOGGER.info("UnixPeerCli.main(argv) :: interrupted")
        return EXIT_OK
    finally:
        if trace_controller.is_enabled():
            trace_controller.disable()


if __name__ == "__main__":  # pragma: no cover - module execution guard
    raise SystemExit(main())
