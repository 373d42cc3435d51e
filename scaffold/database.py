"""Database engine and session management for the durable store."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from scaffold.config.settings import Settings

# Import models so they are attached to Base.metadata before table creation
from scaffold.models import Base
from scaffold.models import principal  # noqa: F401
from scaffold.models import session  # noqa: F401

logger = logging.getLogger(__name__)

SessionFactory = async_sessionmaker[AsyncSession]


def create_engine(settings: Settings) -> AsyncEngine:
    """Create an async engine with environment-appropriate pooling."""

    if not settings.database_url:
        raise RuntimeError("DATABASE_URL is not configured")

    engine_options: dict[str, Any] = {
        "echo": settings.debug,
        "pool_pre_ping": True,
    }

    if settings.debug:
        # No pooling while debugging so connections are never held open.
        engine_options["poolclass"] = NullPool

    return create_async_engine(settings.database_url, **engine_options)


def create_session_factory(engine: AsyncEngine) -> SessionFactory:
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
        class_=AsyncSession,
    )


@asynccontextmanager
async def session_scope(factory: SessionFactory) -> AsyncIterator[AsyncSession]:
    """Async context manager that yields a session from the given factory."""

    async with factory() as session:
        yield session


async def init_models(engine: AsyncEngine) -> None:
    """Create database tables if they do not exist."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Ensured session and principal tables.")


async def dispose_engine(engine: AsyncEngine) -> None:
    """Dispose of the engine and release pooled connections."""

    await engine.dispose()


__all__ = [
    "SessionFactory",
    "create_engine",
    "create_session_factory",
    "dispose_engine",
    "init_models",
    "session_scope",
]
