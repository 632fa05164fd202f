"""Database connection and session management for EstiMate Pro.

Async SQLAlchemy engine and sessions. PostgreSQL (asyncpg) in production,
SQLite (aiosqlite) for development and tests.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from estimatepro.config import get_config
from estimatepro.db.models import Base

logger = structlog.get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the singleton async engine.

    Raises:
        KeyError: If DATABASE_URL is not configured
    """
    global _engine

    if _engine is None:
        db_config = get_config().db
        engine_kwargs: dict = {"echo": db_config.echo}

        # SQLite doesn't support connection pooling parameters
        if "sqlite" not in db_config.url.lower():
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.pool_max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_pre_ping": True,
                    "pool_recycle": 3600,
                }
            )

        _engine = create_async_engine(db_config.url, **engine_kwargs)

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)

    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session (context manager).

    Commits when the block exits cleanly, rolls back and re-raises otherwise.

    Usage:
        async with get_session() as session:
            builder = await session.get(BuilderModel, builder_id)
    """
    session = get_session_factory()()

    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a managed session."""
    async with get_session() as session:
        yield session


async def init_db(drop: bool = False) -> None:
    """Create all tables, optionally dropping existing ones first.

    For production schema changes use migrations; this is for development,
    tests and first-time setup.
    """
    engine = get_engine()

    async with engine.begin() as conn:
        if drop:
            logger.warning("dropping_all_tables")
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the engine; call on application shutdown."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
