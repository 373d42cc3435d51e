"""In-memory fallback session store."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .base import Session, SessionStore, utcnow


class InMemorySessionStore(SessionStore):
    """Process-local session map; contents are lost on restart.

    Records are copied on the way in and out so callers only change stored
    state through ``put`` or ``touch``.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def get(self, session_id: str) -> Optional[Session]:
        stored = self._sessions.get(session_id)
        if stored is None:
            return None
        if stored.is_expired(utcnow()):
            self._sessions.pop(session_id, None)
            return None
        return stored.copy()

    async def put(self, session: Session) -> None:
        self._sessions[session.id] = session.copy()

    async def touch(self, session: Session) -> bool:
        stored = self._sessions.get(session.id)
        if stored is None:
            return False
        self._sessions[session.id] = replace(
            stored,
            last_access_at=session.last_access_at,
            expires_at=session.expires_at,
        )
        return True

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def sweep_expired(self) -> int:
        now = utcnow()
        expired = [key for key, value in self._sessions.items() if value.is_expired(now)]
        for key in expired:
            del self._sessions[key]
        return len(expired)


__all__ = ["InMemorySessionStore"]
