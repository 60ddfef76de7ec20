"""Observability helpers configuring structlog for peer processes."""

from __future__ import annotations

import logging
import sys
from typing import IO, Any, Iterable

import structlog

from services.unix_peer.telemetry import trace_call

LOG_FORMATS = ("json", "console")


@trace_call
def configure_structlog(
    *,
    service_name: str,
    log_level: int = logging.INFO,
    log_format: str = "json",
    stream: IO[str] | None = None,
    processors: Iterable[Any] | None = None,
) -> None:
    """Configure structlog for peer processes.

    Records go to ``stream`` (stderr by default) so that stdout stays free for
    the bytes received from the socket.

    Args:
        service_name: Logical service identifier bound to each record.
        log_level: Minimum level emitted.
        log_format: ``"json"`` for machine-readable lines or ``"console"``.
        stream: Text stream receiving rendered records.
        processors: Optional structlog processor chain overriding the default.

    Raises:
        ValueError: If ``log_format`` is not supported.
    """

    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unsupported log format {log_format!r}; use one of {LOG_FORMATS}")

    output = stream or sys.stderr
    logging.basicConfig(level=log_level, format="%(message)s", stream=output)

    renderer: Any
    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    default_processors = processors or [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        renderer,
    ]

    structlog.configure(
        processors=list(default_processors),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )
    structlog.contextvars.bind_contextvars(service=service_name)


def reset_structlog() -> None:
    """Restore structlog defaults and drop bound context variables."""

    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


__all__ = ["configure_structlog", "reset_structlog", "LOG_FORMATS"]
