"""Session store adapter: record type, backends and backend selection."""

from __future__ import annotations

from typing import Optional

from scaffold.config.settings import Settings
from scaffold.database import SessionFactory

from .base import Session, SessionStore, utcnow
from .database import DatabaseSessionStore
from .memory import InMemorySessionStore
from .sweeper import SessionSweeper


def build_session_store(
    settings: Settings,
    session_factory: Optional[SessionFactory] = None,
) -> SessionStore:
    """Pick the session backend once, at application construction."""

    if settings.session_store == "database":
        if session_factory is None:
            raise RuntimeError("The database session store needs a session factory")
        return DatabaseSessionStore(session_factory)
    return InMemorySessionStore()


__all__ = [
    "DatabaseSessionStore",
    "InMemorySessionStore",
    "Session",
    "SessionStore",
    "SessionSweeper",
    "build_session_store",
    "utcnow",
]
