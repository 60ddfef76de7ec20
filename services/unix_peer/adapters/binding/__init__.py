"""Host runtime binding adapter exports."""

from .host import EXPORTED_METHODS, ErrorCode, HostBinding, error_code_for

__all__ = ["EXPORTED_METHODS", "ErrorCode", "HostBinding", "error_code_for"]
