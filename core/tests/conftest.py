"""Pytest fixtures for core tests.

Store tests talk to the PostgreSQL database named by DATABASE_URL and are
skipped when it is not set.
"""

import uuid

import pytest_asyncio


@pytest_asyncio.fixture
async def database():
    """Bind the engine to the environment's database and create tables."""
    from core import database as db
    from core.config import load_settings

    db.configure(load_settings())
    await db.init_database()

    yield db

    # Clean up the database engine after each test to avoid connection pool issues
    await db.close_engine()


@pytest_asyncio.fixture
async def user_id(database):
    """A unique identity. Its progress record is deleted after the test."""
    from sqlalchemy import delete
    from core.tables import user_progress

    value = f"test_{uuid.uuid4().hex[:12]}"

    yield value

    async with database.get_transaction() as conn:
        await conn.execute(delete(user_progress).where(user_progress.c.user_id == value))
