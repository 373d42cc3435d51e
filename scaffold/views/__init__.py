"""Pydantic request/response schemas."""

from .auth import (
    LoginRequest,
    LoginResponse,
    PrincipalResponse,
    RegisterRequest,
    SessionInfoResponse,
)
from .common import ErrorResponse, HealthResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "PrincipalResponse",
    "RegisterRequest",
    "SessionInfoResponse",
]
