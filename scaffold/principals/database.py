"""SQLAlchemy-backed principal store."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from scaffold.database import SessionFactory
from scaffold.errors import Conflict, StoreUnavailable
from scaffold.models.principal import PrincipalRow

from .base import Principal, PrincipalStore

logger = logging.getLogger(__name__)

_BACKEND_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


class DatabasePrincipalStore(PrincipalStore):
    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def _fetch_one(self, statement) -> Optional[Principal]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(statement)
                row = result.scalar_one_or_none()
        except _BACKEND_ERRORS as exc:
            logger.error("Principal lookup failed: %s", exc)
            raise StoreUnavailable() from exc
        return Principal.model_validate(row) if row is not None else None

    async def get_by_id(self, principal_id: int) -> Optional[Principal]:
        return await self._fetch_one(
            select(PrincipalRow).where(PrincipalRow.id == principal_id)
        )

    async def get_by_username(self, username: str) -> Optional[Principal]:
        return await self._fetch_one(
            select(PrincipalRow).where(PrincipalRow.username == username)
        )

    async def create(
        self,
        username: str,
        password_hash: str,
        display_name: Optional[str] = None,
    ) -> Principal:
        row = PrincipalRow(
            username=username,
            password_hash=password_hash,
            display_name=display_name,
        )
        try:
            async with self._session_factory() as db:
                db.add(row)
                await db.commit()
                await db.refresh(row)
        except IntegrityError as exc:
            raise Conflict("Username already registered") from exc
        except _BACKEND_ERRORS as exc:
            logger.error("Principal creation failed: %s", exc)
            raise StoreUnavailable() from exc
        return Principal.model_validate(row)


__all__ = ["DatabasePrincipalStore"]
