"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, Request, Response

from scaffold.config.settings import Settings
from scaffold.principals import Principal
from scaffold.services import AuthenticationManager
from scaffold.sessions import Session
from scaffold.utils import sign_token, unsign_token


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_manager(request: Request) -> AuthenticationManager:
    return request.app.state.auth


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
AuthDep = Annotated[AuthenticationManager, Depends(get_auth_manager)]


def _extract_bearer_token(request: Request) -> Optional[str]:
    """Return the bearer token from the request headers when present."""

    auth_header = request.headers.get("authorization")
    if not auth_header:
        return None

    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None

    return token.strip()


def get_session_token(request: Request, settings: SettingsDep) -> Optional[str]:
    """Return the verified session id carried by the request, if any.

    The signed cookie wins; a bearer header carrying the same signed value is
    accepted for non-browser clients. Bad signatures count as no token.
    """

    raw = request.cookies.get(settings.session_cookie_name) or _extract_bearer_token(
        request
    )
    if not raw:
        return None
    return unsign_token(raw, settings.secret_key)


SessionTokenDep = Annotated[Optional[str], Depends(get_session_token)]


async def get_current_principal(token: SessionTokenDep, auth: AuthDep) -> Principal:
    """Resolve the principal behind the request's session or raise Unauthenticated."""

    return await auth.authenticate(token)


CurrentPrincipalDep = Annotated[Principal, Depends(get_current_principal)]


def set_session_cookie(response: Response, session: Session, settings: Settings) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        sign_token(session.id, settings.secret_key),
        max_age=session.ttl,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        settings.session_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


__all__ = [
    "AuthDep",
    "CurrentPrincipalDep",
    "SessionTokenDep",
    "SettingsDep",
    "clear_session_cookie",
    "get_current_principal",
    "get_session_token",
    "set_session_cookie",
]
