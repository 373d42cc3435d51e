"""Principal lookup used for credential verification."""

from __future__ import annotations

from typing import Optional

from scaffold.config.settings import Settings
from scaffold.database import SessionFactory

from .base import Principal, PrincipalStore
from .database import DatabasePrincipalStore
from .memory import InMemoryPrincipalStore


def build_principal_store(
    settings: Settings,
    session_factory: Optional[SessionFactory] = None,
) -> PrincipalStore:
    """Principals live in the same backend as sessions."""

    if settings.session_store == "database":
        if session_factory is None:
            raise RuntimeError("The database principal store needs a session factory")
        return DatabasePrincipalStore(session_factory)
    return InMemoryPrincipalStore()


__all__ = [
    "DatabasePrincipalStore",
    "InMemoryPrincipalStore",
    "Principal",
    "PrincipalStore",
    "build_principal_store",
]
