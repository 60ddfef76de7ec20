"""Decorator logging entry, exit, and failure of peer operations."""

from __future__ import annotations

import inspect
import reprlib
import time
from functools import wraps
from typing import Any, Callable, TypeVar, cast

from .logger import error_fields, get_logger

F = TypeVar("F", bound=Callable[..., Any])

_ARGUMENT_REPR = reprlib.Repr()
_ARGUMENT_REPR.maxstring = 128
_ARGUMENT_REPR.maxother = 128


def _argument_fields(signature: inspect.Signature, args, kwargs) -> dict[str, str]:
    bound = signature.bind_partial(*args, **kwargs)
    return {
        name: _ARGUMENT_REPR.repr(value)
        for name, value in bound.arguments.items()
        if name != "self"
    }


def trace_call(
    func: F | None = None,
    *,
    name: str | None = None,
    logger: Any | None = None,
) -> F | Callable[[F], F]:
    """Log calls to ``func`` at DEBUG, and failures at ERROR.

    Usable bare (``@trace_call``) or with options
    (``@trace_call(name="UnixStreamPeer.open", logger=LOGGER)``). Argument
    values are logged as shortened ``repr`` strings with ``self`` left out.
    Exit and error records carry ``duration_ms``; error records add the
    exception's peer error ``code`` or ``errno`` when it has one. Exceptions
    are re-raised unchanged.
    """

    def decorator(inner: F) -> F:
        label = name or inner.__qualname__
        log = logger or get_logger(inner.__module__)
        signature = inspect.signature(inner)

        @wraps(inner)
        def wrapper(*args: Any, **kwargs: Any):
            arguments = _argument_fields(signature, args, kwargs)
            log.debug(f"{label} :: enter", arguments=arguments or None)
            started = time.perf_counter()
            try:
                result = inner(*args, **kwargs)
            except Exception as exc:
                log.error(
                    f"{label} :: error",
                    arguments=arguments or None,
                    duration_ms=round((time.perf_counter() - started) * 1000.0, 3),
                    **error_fields(exc),
                )
                raise
            log.debug(
                f"{label} :: exit",
                duration_ms=round((time.perf_counter() - started) * 1000.0, 3),
            )
            return result

        return cast(F, wrapper)

    if func is not None:
        return decorator(func)
    return decorator


__all__ = ["trace_call"]
