"""Telemetry helpers for observability instrumentation."""

from .decorators import trace_call
from .logger import error_fields, get_logger
from .sections import TraceSection, trace_section
from .tracing import TraceController

__all__ = [
    "error_fields",
    "get_logger",
    "trace_call",
    "TraceSection",
    "trace_section",
    "TraceController",
]
