"""Centralized error normalization.

Every failure that escapes a route is turned into one JSON error envelope
``{"message": ..., "details"?: ...}`` here. Server errors are re-raised after
the response is sent so they still reach the ASGI server's error logging.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from scaffold.errors import AppError, ValidationFailed
from scaffold.telemetry import record_server_error

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Internal server error"


def build_error_envelope(exc: BaseException) -> tuple[int, dict[str, Any]]:
    """Return the status code and client-facing body for ``exc``."""

    if isinstance(exc, AppError):
        return exc.status_code, exc.to_dict()

    status_code = getattr(exc, "status_code", None)
    if not isinstance(status_code, int) or not 400 <= status_code <= 599:
        status_code = 500

    if status_code >= 500:
        # Anything we did not raise on purpose keeps its details server-side.
        return status_code, {"message": GENERIC_SERVER_ERROR}

    message = getattr(exc, "detail", None) or getattr(exc, "message", None) or str(exc)
    return status_code, {"message": str(message)}


class ErrorNormalizerMiddleware:
    """Terminal error boundary that responds exactly once per request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            status_code, body = build_error_envelope(exc)
            method = scope.get("method", "-")
            path = scope.get("path", "-")

            if status_code >= 500:
                record_server_error(method, status_code)
                logger.error(
                    "%s %s failed with %s", method, path, status_code, exc_info=exc
                )
            else:
                logger.info("%s %s -> %s: %s", method, path, status_code, body["message"])

            if response_started:
                logger.warning(
                    "Response for %s %s already started; error envelope not sent",
                    method,
                    path,
                )
            else:
                response = JSONResponse(status_code=status_code, content=body)
                await response(scope, receive, send_wrapper)

            # Client errors end here so they stay out of server error logs.
            if status_code >= 500:
                raise


async def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = ValidationFailed(details=jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if isinstance(exc.detail, str):
        body: dict[str, Any] = {"message": exc.detail}
    else:
        body = {"message": "Request failed", "details": jsonable_encoder(exc.detail)}
    return JSONResponse(
        status_code=exc.status_code,
        content=body,
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render framework-raised errors with the same envelope shape."""

    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)


__all__ = [
    "ErrorNormalizerMiddleware",
    "build_error_envelope",
    "register_exception_handlers",
]
