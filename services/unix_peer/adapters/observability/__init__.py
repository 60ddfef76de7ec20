"""Observability adapter exports."""

from .telemetry import configure_structlog, reset_structlog

__all__ = ["configure_structlog", "reset_structlog"]
