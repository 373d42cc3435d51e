"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter

LOGIN_COUNTER = Counter(
    "app_logins_total",
    "Login attempts by outcome",
    ("outcome",),
)

SESSIONS_SWEPT = Counter(
    "app_sessions_swept_total",
    "Expired sessions removed by the background sweeper",
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Requests that ended in a server-error response",
    ("method", "status"),
)


def record_login(success: bool) -> None:
    """Count a login attempt."""

    LOGIN_COUNTER.labels(outcome="success" if success else "failure").inc()


def record_sweep(removed: int) -> None:
    if removed > 0:
        SESSIONS_SWEPT.inc(removed)


def record_server_error(method: str, status_code: int) -> None:
    ERROR_COUNTER.labels(method=method or "UNKNOWN", status=str(status_code)).inc()
