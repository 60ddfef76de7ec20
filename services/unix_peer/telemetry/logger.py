"""Logging helper returning structlog loggers bound to a component name."""

from __future__ import annotations

from typing import Any

import structlog

_ROOT_LOGGER = structlog.get_logger("unix_peer.telemetry.logger")


def get_logger(name: str, **context):
    """Return a structlog logger for ``name`` with optional bound context.

    Args:
        name: Fully qualified logger name.
        **context: Key/value pairs bound to every record emitted by the logger.

    Returns:
        A structlog bound logger.

    Example:
        >>> log = get_logger("unix_peer.example")
        >>> log.info("ExampleLogger.get_logger(name) :: start")
    """

    _ROOT_LOGGER.debug(
        "LoggerFactory.get_logger(name) :: start",
        logger_name=name,
        context_keys=list(context) or None,
    )
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger


def error_fields(exc: BaseException) -> dict[str, Any]:
    """Return log fields describing ``exc``.

    Peer errors contribute their ``code`` and ``path``, OS errors their ``errno``.
    """

    fields: dict[str, Any] = {"error": str(exc), "error_type": type(exc).__name__}
    for attr in ("code", "errno", "path"):
        value = getattr(exc, attr, None)
        if value not in (None, ""):
            fields[attr] = value
    return fields


__all__ = ["error_fields", "get_logger"]
