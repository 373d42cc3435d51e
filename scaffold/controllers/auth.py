"""Authentication controller: login, logout, registration and introspection."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from scaffold.controllers.dependencies import (
    AuthDep,
    CurrentPrincipalDep,
    SessionTokenDep,
    SettingsDep,
    clear_session_cookie,
    set_session_cookie,
)
from scaffold.views import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    PrincipalResponse,
    RegisterRequest,
    SessionInfoResponse,
)

router = APIRouter(
    tags=["auth"],
    responses={
        400: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


@router.post(
    "/register",
    response_model=LoginResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    payload: RegisterRequest,
    response: Response,
    auth: AuthDep,
    settings: SettingsDep,
    token: SessionTokenDep,
) -> LoginResponse:
    """Create a principal and log it in straight away."""

    principal = await auth.register(
        payload.username, payload.password, payload.display_name
    )
    await auth.end_session(token)
    session = await auth.start_session(principal)
    set_session_cookie(response, session, settings)
    return LoginResponse(
        user=PrincipalResponse.from_principal(principal),
        expires_at=session.expires_at,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}},
)
async def login(
    payload: LoginRequest,
    response: Response,
    auth: AuthDep,
    settings: SettingsDep,
    token: SessionTokenDep,
) -> LoginResponse:
    """Validate credentials and open a new session."""

    principal = await auth.verify_credentials(payload.username, payload.password)

    # A fresh id on every login; the pre-login session is discarded.
    await auth.end_session(token)
    session = await auth.start_session(principal)
    set_session_cookie(response, session, settings)

    return LoginResponse(
        user=PrincipalResponse.from_principal(principal),
        expires_at=session.expires_at,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    auth: AuthDep,
    settings: SettingsDep,
    token: SessionTokenDep,
) -> Response:
    await auth.end_session(token)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_session_cookie(response, settings)
    return response


@router.get("/session", response_model=SessionInfoResponse)
async def session_info(auth: AuthDep, token: SessionTokenDep) -> SessionInfoResponse:
    """Report whether the request carries a live authenticated session."""

    session = await auth.resolve_session(token)
    if session is None or not session.is_authenticated:
        return SessionInfoResponse(authenticated=False)
    return SessionInfoResponse(authenticated=True, expires_at=session.expires_at)


@router.get(
    "/user",
    response_model=PrincipalResponse,
    responses={401: {"model": ErrorResponse}},
)
async def current_user(principal: CurrentPrincipalDep) -> PrincipalResponse:
    return PrincipalResponse.from_principal(principal)
