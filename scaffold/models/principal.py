"""SQLAlchemy model for authenticatable principals."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PrincipalRow(Base):
    __tablename__ = "principals"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    display_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


__all__ = ["PrincipalRow"]
