"""Application middleware package."""

from .errors import ErrorNormalizerMiddleware, register_exception_handlers
from .logging import RequestLoggingMiddleware

__all__ = [
    "ErrorNormalizerMiddleware",
    "RequestLoggingMiddleware",
    "register_exception_handlers",
]
