"""Pydantic schemas related to authentication."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from scaffold.principals import Principal


class LoginRequest(BaseModel):
    """Credentials submitted to open a session."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8, max_length=128)
    display_name: Optional[str] = Field(
        default=None,
        alias="displayName",
        max_length=255,
    )


class PrincipalResponse(BaseModel):
    """Public view of a principal; never carries the credential hash."""

    id: int
    username: str
    display_name: Optional[str] = Field(default=None, serialization_alias="displayName")

    @classmethod
    def from_principal(cls, principal: Principal) -> "PrincipalResponse":
        return cls(
            id=principal.id,
            username=principal.username,
            display_name=principal.display_name,
        )


class LoginResponse(BaseModel):
    user: PrincipalResponse
    expires_at: datetime = Field(serialization_alias="expiresAt")


class SessionInfoResponse(BaseModel):
    """Session introspection result."""

    authenticated: bool
    expires_at: Optional[datetime] = Field(default=None, serialization_alias="expiresAt")


__all__ = [
    "LoginRequest",
    "LoginResponse",
    "PrincipalResponse",
    "RegisterRequest",
    "SessionInfoResponse",
]
