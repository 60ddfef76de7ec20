"""Deep call tracing for debugging peer sessions from the command line."""

from __future__ import annotations

import inspect
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from .logger import get_logger


def _module_selected(module_name: str, include: Iterable[str], exclude: Iterable[str]) -> bool:
    """Return whether ``module_name`` passes the include/exclude prefix rules.

    An empty ``include`` admits every module; ``exclude`` always wins.
    """

    if include and not any(module_name.startswith(prefix) for prefix in include):
        return False
    return not any(module_name.startswith(prefix) for prefix in exclude)


def _short_repr(value: Any, limit: int) -> str:
    try:
        return repr(value)[:limit]
    except Exception:  # pragma: no cover - defensive
        return f"<unreprable:{type(value).__name__}>"


@dataclass
class TraceController:
    """Install interpreter trace hooks that log calls into the peer package.

    Args:
        logger: Structured logger used to emit tracing diagnostics.
        include_modules: Module prefixes eligible for tracing.
        exclude_modules: Module prefixes skipped even when included.
        trace_returns: Also log return values, not only calls.
        max_repr: Truncation length for argument and return ``repr`` output.
    """

    logger: Any | None = None
    include_modules: tuple[str, ...] = ("services.unix_peer",)
    exclude_modules: tuple[str, ...] = ("services.unix_peer.telemetry",)
    trace_returns: bool = False
    max_repr: int = 128
    _enabled: bool = field(init=False, default=False)
    _previous_trace: Callable | None = field(init=False, default=None)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock)

    def __post_init__(self) -> None:
        if self.logger is None:
            self.logger = get_logger("unix_peer.telemetry.trace_controller")

    def __enter__(self) -> "TraceController":
        self.enable()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.disable()
        return False

    def enable(self) -> None:
        """Start tracing; repeated calls are ignored."""

        with self._lock:
            if self._enabled:
                return
            self.logger.info(
                "TraceController.enable(self) :: start",
                include=list(self.include_modules) or None,
                exclude=list(self.exclude_modules) or None,
                trace_returns=self.trace_returns,
            )
            self._previous_trace = sys.gettrace()
            sys.settrace(self._trace)
            threading.settrace(self._trace)
            self._enabled = True

    def disable(self) -> None:
        """Stop tracing and restore whatever hook was active before."""

        with self._lock:
            if not self._enabled:
                return
            sys.settrace(self._previous_trace)
            threading.settrace(self._previous_trace)
            self.logger.info("TraceController.disable(self) :: complete")
            self._enabled = False
            self._previous_trace = None

    def is_enabled(self) -> bool:
        return self._enabled

    def _trace(self, frame, event: str, arg):
        """Interpreter hook; returns itself so nested frames stay traced."""

        if event not in {"call", "return"}:
            return self._trace
        if event == "return" and not self.trace_returns:
            return self._trace

        module_name = frame.f_globals.get("__name__", "")
        if not _module_selected(module_name, self.include_modules, self.exclude_modules):
            return self._trace

        code = frame.f_code
        if event == "return":
            self.logger.debug(
                "TraceController._trace(frame, event, arg) :: return",
                module=module_name,
                function=code.co_qualname if hasattr(code, "co_qualname") else code.co_name,
                result=_short_repr(arg, self.max_repr),
            )
            return self._trace

        info = inspect.getargvalues(frame)
        arguments = {
            name: _short_repr(info.locals.get(name, "<missing>"), self.max_repr)
            for name in info.args
            if name != "self"
        }
        self.logger.debug(
            "TraceController._trace(frame, event, arg) :: call",
            module=module_name,
            function=code.co_qualname if hasattr(code, "co_qualname") else code.co_name,
            filename=code.co_filename,
            lineno=frame.f_lineno,
            arguments=arguments or None,
        )
        return self._trace


__all__ = ["TraceController"]
