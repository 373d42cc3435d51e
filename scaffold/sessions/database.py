"""Durable session store backed by the relational database."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scaffold.config.settings import ExpiryPolicy
from scaffold.database import SessionFactory
from scaffold.errors import StoreUnavailable
from scaffold.models.session import SessionRow

from .base import Session, SessionStore, utcnow

logger = logging.getLogger(__name__)

# Errors that mean the backend could not be reached or failed mid-operation.
_BACKEND_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


def _as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; drivers without tz support hand back naive values."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_session(row: SessionRow) -> Session:
    return Session(
        id=row.id,
        principal_id=row.principal_id,
        created_at=_as_utc(row.created_at),
        last_access_at=_as_utc(row.last_access_at),
        expires_at=_as_utc(row.expires_at),
        ttl=row.ttl_seconds,
        policy=ExpiryPolicy(row.policy),
        data=dict(row.data or {}),
    )


def _to_row(session: Session) -> SessionRow:
    return SessionRow(
        id=session.id,
        principal_id=session.principal_id,
        created_at=session.created_at,
        last_access_at=session.last_access_at,
        expires_at=session.expires_at,
        ttl_seconds=session.ttl,
        policy=session.policy.value,
        data=dict(session.data),
    )


class DatabaseSessionStore(SessionStore):
    """SQLAlchemy implementation of the session store."""

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    yield db
        except _BACKEND_ERRORS as exc:
            logger.error("Session store %s failed: %s", operation, exc)
            raise StoreUnavailable() from exc

    async def get(self, session_id: str) -> Optional[Session]:
        async with self._transaction("get") as db:
            row = await db.get(SessionRow, session_id)
            if row is None:
                return None
            session = _to_session(row)
            if session.is_expired(utcnow()):
                await db.delete(row)
                return None
            return session

    async def put(self, session: Session) -> None:
        async with self._transaction("put") as db:
            await db.merge(_to_row(session))

    async def touch(self, session: Session) -> bool:
        async with self._transaction("touch") as db:
            result = await db.execute(
                update(SessionRow)
                .where(SessionRow.id == session.id)
                .values(
                    last_access_at=session.last_access_at,
                    expires_at=session.expires_at,
                )
            )
            return result.rowcount > 0

    async def delete(self, session_id: str) -> None:
        async with self._transaction("delete") as db:
            await db.execute(delete(SessionRow).where(SessionRow.id == session_id))

    async def sweep_expired(self) -> int:
        async with self._transaction("sweep") as db:
            result = await db.execute(
                select(SessionRow.id).where(SessionRow.expires_at <= utcnow())
            )
            expired = list(result.scalars().all())
            if expired:
                await db.execute(delete(SessionRow).where(SessionRow.id.in_(expired)))
            return len(expired)


__all__ = ["DatabaseSessionStore"]
