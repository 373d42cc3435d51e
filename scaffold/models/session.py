"""SQLAlchemy model backing the durable session store."""

from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String

from .base import Base


class SessionRow(Base):
    """Persisted server-side session."""

    __tablename__ = "sessions"

    id = Column(String(128), primary_key=True)
    principal_id = Column(
        Integer,
        ForeignKey("principals.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_access_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    policy = Column(String(16), nullable=False)
    ttl_seconds = Column(Integer, nullable=False)
    data = Column(JSON, nullable=False, default=dict)


__all__ = ["SessionRow"]
