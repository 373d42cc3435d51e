"""Credential verification and session lifecycle."""

from __future__ import annotations

import logging
from typing import Any, Optional

from scaffold.config.settings import ExpiryPolicy
from scaffold.errors import InvalidCredentials, Unauthenticated
from scaffold.principals import Principal, PrincipalStore
from scaffold.sessions import Session, SessionStore, utcnow
from scaffold.telemetry import record_login
from scaffold.utils import (
    DUMMY_PASSWORD_HASH,
    generate_session_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


class AuthenticationManager:
    """Binds principals to sessions held in a :class:`SessionStore`.

    A session moves Anonymous -> Authenticated through :meth:`start_session`
    and back through :meth:`end_session` or expiry. Store outages raise
    ``StoreUnavailable`` and are never reported as ``Unauthenticated``.
    """

    def __init__(
        self,
        sessions: SessionStore,
        principals: PrincipalStore,
        *,
        session_ttl: int,
        expiry_policy: ExpiryPolicy = ExpiryPolicy.SLIDING,
    ) -> None:
        self.sessions = sessions
        self.principals = principals
        self.session_ttl = session_ttl
        self.expiry_policy = expiry_policy

    async def verify_credentials(self, identifier: str, secret: str) -> Principal:
        """Return the principal for valid credentials, else raise InvalidCredentials.

        Unknown identifiers still pay for a hash comparison, and both failure
        cases raise the same error.
        """

        principal = await self.principals.get_by_username(identifier)
        stored_hash = principal.password_hash if principal else DUMMY_PASSWORD_HASH
        matches = verify_password(secret, stored_hash)

        if principal is None or not matches:
            record_login(False)
            raise InvalidCredentials()

        record_login(True)
        return principal

    async def register(
        self,
        username: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> Principal:
        principal = await self.principals.create(
            username=username,
            password_hash=hash_password(password),
            display_name=display_name,
        )
        logger.info("Registered principal %s", principal.id)
        return principal

    async def start_session(
        self,
        principal: Principal,
        data: Optional[dict[str, Any]] = None,
    ) -> Session:
        session = Session.new(
            generate_session_token(),
            ttl=self.session_ttl,
            policy=self.expiry_policy,
            principal_id=principal.id,
            data=data,
        )
        await self.sessions.put(session)
        return session

    async def end_session(self, session_id: Optional[str]) -> None:
        """Delete the session; unknown or missing ids are not an error."""

        if not session_id:
            return
        await self.sessions.delete(session_id)

    async def resolve_session(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        return await self.sessions.get(session_id)

    async def authenticate(self, session_id: Optional[str]) -> Principal:
        """Resolve the principal behind a session and record the access."""

        session = await self.resolve_session(session_id)
        now = utcnow()
        if session is None or not session.is_authenticated or session.is_expired(now):
            raise Unauthenticated()

        principal = await self.principals.get_by_id(session.principal_id)
        if principal is None:
            await self.sessions.delete(session.id)
            raise Unauthenticated()

        session.touch(now)
        if not await self.sessions.touch(session):
            # Ended while the principal was being loaded.
            raise Unauthenticated()
        return principal


__all__ = ["AuthenticationManager"]
