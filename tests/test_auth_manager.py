"""AuthenticationManager behaviour against the in-memory stores."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import timedelta

import pytest

from scaffold.config.settings import ExpiryPolicy
from scaffold.errors import InvalidCredentials, StoreUnavailable, Unauthenticated
from scaffold.principals import InMemoryPrincipalStore
from scaffold.services import AuthenticationManager
from scaffold.sessions import InMemorySessionStore, SessionStore, utcnow

PASSWORD = "s3cret-password"


def _manager(policy: ExpiryPolicy = ExpiryPolicy.SLIDING, ttl: int = 3600):
    return AuthenticationManager(
        InMemorySessionStore(),
        InMemoryPrincipalStore(),
        session_ttl=ttl,
        expiry_policy=policy,
    )


def _age_session(manager: AuthenticationManager, session_id: str, seconds: int):
    """Shift a stored session back in time as if it had been idle."""

    stored = manager.sessions._sessions[session_id]
    delta = timedelta(seconds=seconds)
    manager.sessions._sessions[session_id] = replace(
        stored,
        created_at=stored.created_at - delta,
        last_access_at=stored.last_access_at - delta,
        expires_at=stored.expires_at - delta,
    )
    return manager.sessions._sessions[session_id]


def test_verify_credentials_returns_principal():
    manager = _manager()
    registered = asyncio.run(manager.register("bob", PASSWORD))

    principal = asyncio.run(manager.verify_credentials("bob", PASSWORD))

    assert principal.id == registered.id
    assert principal.password_hash != PASSWORD


def test_wrong_secret_and_unknown_identifier_are_indistinguishable():
    manager = _manager()
    asyncio.run(manager.register("bob", PASSWORD))

    with pytest.raises(InvalidCredentials) as wrong_secret:
        asyncio.run(manager.verify_credentials("bob", "not-the-password"))
    with pytest.raises(InvalidCredentials) as unknown:
        asyncio.run(manager.verify_credentials("nobody", PASSWORD))

    assert wrong_secret.value.to_dict() == unknown.value.to_dict()
    assert wrong_secret.value.status_code == unknown.value.status_code == 401


def test_start_session_issues_unique_tokens():
    manager = _manager()
    principal = asyncio.run(manager.register("bob", PASSWORD))

    first = asyncio.run(manager.start_session(principal))
    second = asyncio.run(manager.start_session(principal))

    assert first.id != second.id
    assert len(first.id) >= 32
    assert first.principal_id == principal.id


def test_authenticate_sliding_extends_last_access_and_expiry():
    manager = _manager(ExpiryPolicy.SLIDING, ttl=3600)
    principal = asyncio.run(manager.register("bob", PASSWORD))
    session = asyncio.run(manager.start_session(principal))
    aged = _age_session(manager, session.id, 600)

    resolved = asyncio.run(manager.authenticate(session.id))

    stored = asyncio.run(manager.sessions.get(session.id))
    assert resolved.id == principal.id
    assert stored.last_access_at > aged.last_access_at
    assert stored.expires_at > aged.expires_at


def test_authenticate_fixed_leaves_expiry_untouched():
    manager = _manager(ExpiryPolicy.FIXED, ttl=3600)
    principal = asyncio.run(manager.register("bob", PASSWORD))
    session = asyncio.run(manager.start_session(principal))
    aged = _age_session(manager, session.id, 600)

    asyncio.run(manager.authenticate(session.id))

    stored = asyncio.run(manager.sessions.get(session.id))
    assert stored.last_access_at > aged.last_access_at
    assert stored.expires_at == aged.expires_at


def test_expired_session_is_rejected_while_still_stored():
    manager = _manager(ttl=60)
    principal = asyncio.run(manager.register("bob", PASSWORD))
    session = asyncio.run(manager.start_session(principal))
    _age_session(manager, session.id, 120)
    assert session.id in manager.sessions._sessions

    with pytest.raises(Unauthenticated):
        asyncio.run(manager.authenticate(session.id))


@pytest.mark.parametrize("token", [None, "", "never-issued"])
def test_authenticate_without_live_session(token):
    manager = _manager()

    with pytest.raises(Unauthenticated):
        asyncio.run(manager.authenticate(token))


def test_end_session_is_idempotent():
    manager = _manager()
    principal = asyncio.run(manager.register("bob", PASSWORD))
    session = asyncio.run(manager.start_session(principal))

    asyncio.run(manager.end_session(session.id))
    asyncio.run(manager.end_session(session.id))

    with pytest.raises(Unauthenticated):
        asyncio.run(manager.authenticate(session.id))


class _UnavailableStore(SessionStore):
    async def get(self, session_id):
        raise StoreUnavailable()

    async def put(self, session):
        raise StoreUnavailable()

    async def touch(self, session):
        raise StoreUnavailable()

    async def delete(self, session_id):
        raise StoreUnavailable()

    async def sweep_expired(self):
        raise StoreUnavailable()


def test_store_outage_is_not_reported_as_unauthenticated():
    manager = AuthenticationManager(
        _UnavailableStore(), InMemoryPrincipalStore(), session_ttl=60
    )

    with pytest.raises(StoreUnavailable):
        asyncio.run(manager.authenticate("some-session"))


def test_session_for_removed_principal_is_dropped():
    manager = _manager()
    principal = asyncio.run(manager.register("bob", PASSWORD))
    session = asyncio.run(manager.start_session(principal))
    manager.principals._by_id.clear()

    with pytest.raises(Unauthenticated):
        asyncio.run(manager.authenticate(session.id))
    assert asyncio.run(manager.sessions.get(session.id)) is None
    assert utcnow() < session.expires_at


class _SlowPrincipalStore(InMemoryPrincipalStore):
    """Principal lookups that yield to the event loop like a database round trip."""

    async def get_by_id(self, principal_id):
        await asyncio.sleep(0.01)
        return await super().get_by_id(principal_id)


def test_logout_during_authenticate_is_not_undone():
    manager = AuthenticationManager(
        InMemorySessionStore(), _SlowPrincipalStore(), session_ttl=3600
    )

    async def scenario():
        principal = await manager.register("bob", PASSWORD)
        session = await manager.start_session(principal)

        pending = asyncio.create_task(manager.authenticate(session.id))
        await asyncio.sleep(0.001)
        await manager.end_session(session.id)

        with pytest.raises(Unauthenticated):
            await pending
        return await manager.sessions.get(session.id)

    assert asyncio.run(scenario()) is None
