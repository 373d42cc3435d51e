"""Request/response logging middleware for API requests."""

from __future__ import annotations

import logging
import time
from typing import Optional

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("scaffold.middleware.requests")

COLOR_RESET = "\u001b[0m"
COLOR_GREEN = "\u001b[32m"
COLOR_CYAN = "\u001b[36m"
COLOR_YELLOW = "\u001b[33m"
COLOR_RED = "\u001b[31m"

BODY_SNAPSHOT_LIMIT = 80
ELLIPSIS = "…"


def truncate_body(text: str, limit: int = BODY_SNAPSHOT_LIMIT) -> str:
    """Cap ``text`` at ``limit`` characters, marking any cut with an ellipsis."""

    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


class RequestLoggingMiddleware:
    """Emit one log line per API request once its response has been sent.

    The downstream ``send`` is wrapped: every message is forwarded as soon as
    it arrives and unchanged, while a bounded copy of a JSON body is kept on
    the side for the log line.
    """

    def __init__(
        self,
        app: ASGIApp,
        api_prefix: str = "/api",
        body_limit: int = BODY_SNAPSHOT_LIMIT,
    ) -> None:
        self.app = app
        self.api_prefix = "/" + api_prefix.strip("/")
        self.body_limit = body_limit
        # Worst case four UTF-8 bytes per character, plus one extra character
        # so truncation can be detected.
        self._capture_bytes = (body_limit + 1) * 4

    def _is_api_path(self, path: str) -> bool:
        return path == self.api_prefix or path.startswith(self.api_prefix + "/")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._is_api_path(scope["path"]):
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        status_code: Optional[int] = None
        captured: Optional[bytearray] = None
        logged = False

        def emit() -> None:
            nonlocal logged
            if logged:
                return
            logged = True
            snapshot = None
            if captured is not None:
                snapshot = truncate_body(
                    captured.decode("utf-8", errors="ignore"), self.body_limit
                )
            self._log(scope, status_code or 500, self._elapsed_ms(start_time), snapshot)

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code, captured
            if message["type"] == "http.response.start":
                status_code = message["status"]
                content_type = Headers(raw=message.get("headers", [])).get(
                    "content-type", ""
                )
                if "json" in content_type.lower():
                    captured = bytearray()
            elif message["type"] == "http.response.body" and captured is not None:
                room = self._capture_bytes - len(captured)
                if room > 0:
                    captured.extend(message.get("body", b"")[:room])

            await send(message)

            if message["type"] == "http.response.body" and not message.get(
                "more_body", False
            ):
                emit()

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            emit()
            raise

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        """Return elapsed milliseconds rounded to two decimals."""

        return round((time.perf_counter() - start_time) * 1000, 2)

    @staticmethod
    def _log(
        scope: Scope,
        status_code: int,
        duration_ms: float,
        snapshot: Optional[str],
    ) -> None:
        method = scope.get("method", "-")
        path = scope.get("path", "-")
        message = f"{method} {path} {status_code} in {duration_ms}ms"
        if snapshot is not None:
            message = f"{message} :: {snapshot}"

        logger.info(
            f"{_status_color(status_code)}{message}{COLOR_RESET}",
            extra={
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": duration_ms,
                "body": snapshot,
            },
        )


def _status_color(status: int) -> str:
    if 200 <= status < 300:
        return COLOR_GREEN
    if 400 <= status < 500:
        return COLOR_YELLOW
    if status >= 500:
        return COLOR_RED
    return COLOR_CYAN


__all__ = ["BODY_SNAPSHOT_LIMIT", "RequestLoggingMiddleware", "truncate_body"]
