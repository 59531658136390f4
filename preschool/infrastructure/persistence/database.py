"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Schema is managed by Alembic migrations (alembic upgrade head). Tests and
local development may create tables from Base.metadata instead.

Engine and session factory are created lazily on first use so import does
not trigger Settings validation.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from preschool.core.config import get_settings

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine. Pool sizing only applies to server databases."""
    kwargs: dict[str, Any] = {"echo": echo}
    if database_url.startswith("postgresql"):
        kwargs.update(
            pool_pre_ping=True,
            pool_size=10,
            max_overflow=20,
            pool_recycle=3600,
            connect_args={"command_timeout": 60},
        )
    return create_async_engine(database_url, **kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    engine = build_engine(settings.database_url, settings.database_echo)
    AsyncSessionLocal = build_session_factory(engine)
    logger.info("Database engine created (%s)", engine.url.get_backend_name())


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, creating it on first use."""
    _ensure_engine()
    assert engine is not None
    return engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the process-wide session factory (record store repositories open one session per call)."""
    _ensure_engine()
    assert AsyncSessionLocal is not None
    return AsyncSessionLocal


async def create_tables(bind: AsyncEngine | None = None) -> None:
    """Create all tables from ORM metadata (tests and local development only)."""
    import preschool.infrastructure.persistence.models  # noqa: F401

    if bind is None:
        _ensure_engine()
        bind = engine
    assert bind is not None
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose the engine (application shutdown)."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None
