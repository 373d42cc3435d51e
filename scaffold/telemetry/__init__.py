"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    LOGIN_COUNTER,
    SESSIONS_SWEPT,
    record_login,
    record_server_error,
    record_sweep,
)

__all__ = [
    "ERROR_COUNTER",
    "LOGIN_COUNTER",
    "SESSIONS_SWEPT",
    "record_login",
    "record_server_error",
    "record_sweep",
]
