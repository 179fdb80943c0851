"""
SQLAlchemy async database client for the Syllabus Tracker backend.

Provides async connection management using SQLAlchemy Core with asyncpg.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from .config import Settings, get_settings
from .tables import metadata

logger = logging.getLogger(__name__)

# Module-level engine (created on first use)
_engine: AsyncEngine | None = None
_settings: Settings | None = None


class BackendUnavailableError(Exception):
    """The persistence backend could not be reached."""


def configure(settings: Settings) -> None:
    """Bind the engine to these settings. Call once at startup, before use."""
    global _settings
    _settings = settings


def get_engine() -> AsyncEngine:
    """Get or create the async SQLAlchemy engine singleton."""
    global _engine
    if _engine is None:
        settings = _settings or get_settings()
        _engine = create_async_engine(
            settings.async_database_url,
            echo=settings.sql_echo,
            # Connection pool settings
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=1800,  # Recycle connections every 30 minutes
            pool_pre_ping=True,
        )
    return _engine


@asynccontextmanager
async def get_connection() -> AsyncGenerator[AsyncConnection, None]:
    """
    Get an async database connection from the pool.

    Usage:
        async with get_connection() as conn:
            result = await conn.execute(select(user_progress))
            row = result.mappings().first()
    """
    engine = get_engine()
    async with engine.connect() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncConnection, None]:
    """
    Get an async database connection with automatic transaction management.
    Commits on success, rolls back on exception.

    Usage:
        async with get_transaction() as conn:
            await conn.execute(insert(user_progress).values(...))
            # Auto-commits if no exception
    """
    engine = get_engine()
    async with engine.begin() as conn:
        yield conn


async def init_database() -> None:
    """
    Verify connectivity and create missing tables.

    Raises:
        BackendUnavailableError: If the database cannot be reached
    """
    try:
        async with get_transaction() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(metadata.create_all)
    except (SQLAlchemyError, OSError) as e:
        raise BackendUnavailableError(f"Database connection failed: {e}") from e


async def check_connection() -> bool:
    """Return True if a round trip to the database succeeds."""
    if _engine is None and not (_settings or get_settings()).database_url:
        return False
    try:
        async with get_connection() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database health check failed: {e}")
        return False


async def close_engine() -> None:
    """Close the engine and all connections. Call on shutdown."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def is_configured() -> bool:
    """Check if database credentials are configured."""
    return bool((_settings or get_settings()).database_url)
