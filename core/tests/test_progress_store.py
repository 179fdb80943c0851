"""Tests for the progress store against PostgreSQL."""

import asyncio
import os

import pytest

from core.progress import (
    ProgressNotFoundError,
    count_progress,
    delete_progress,
    get_or_create_progress,
    update_progress,
)

pytestmark = pytest.mark.skipif(
    not os.environ.get("DATABASE_URL"),
    reason="DATABASE_URL not set; store tests need PostgreSQL",
)


@pytest.mark.asyncio
async def test_first_read_creates_empty_record(database, user_id):
    """get_or_create_progress should materialize an empty record."""
    async with database.get_transaction() as conn:
        progress = await get_or_create_progress(conn, user_id)

    assert progress["user_id"] == user_id
    assert progress["completed_objectives"] == {}
    assert progress["active_syllabus"] is None
    assert progress["last_updated"] is not None


@pytest.mark.asyncio
async def test_second_read_is_idempotent(database, user_id):
    async with database.get_transaction() as conn:
        first = await get_or_create_progress(conn, user_id)

    async with database.get_transaction() as conn:
        second = await get_or_create_progress(conn, user_id)

    assert first == second


@pytest.mark.asyncio
async def test_concurrent_first_reads_create_one_record(database, user_id):
    async def read():
        async with database.get_transaction() as conn:
            return await get_or_create_progress(conn, user_id)

    results = await asyncio.gather(read(), read(), read())

    assert all(r["user_id"] == user_id for r in results)
    async with database.get_connection() as conn:
        # Deleting reports exactly one row
        assert await delete_progress(conn, user_id) == 1
        await conn.commit()


@pytest.mark.asyncio
async def test_update_replaces_objectives(database, user_id):
    """completed_objectives is replaced wholesale, never merged."""
    async with database.get_transaction() as conn:
        await update_progress(conn, user_id, completed_objectives={"a": True, "b": True})

    async with database.get_transaction() as conn:
        await update_progress(conn, user_id, completed_objectives={"c": True})

    async with database.get_transaction() as conn:
        progress = await get_or_create_progress(conn, user_id)

    assert progress["completed_objectives"] == {"c": True}


@pytest.mark.asyncio
async def test_update_creates_missing_record(database, user_id):
    async with database.get_transaction() as conn:
        progress = await update_progress(conn, user_id, active_syllabus="CS101")

    assert progress["user_id"] == user_id
    assert progress["active_syllabus"] == "CS101"
    assert progress["completed_objectives"] == {}


@pytest.mark.asyncio
async def test_omitted_field_left_untouched(database, user_id):
    async with database.get_transaction() as conn:
        await update_progress(
            conn, user_id, completed_objectives={"a": True}, active_syllabus="CS101"
        )

    async with database.get_transaction() as conn:
        progress = await update_progress(conn, user_id, active_syllabus="MATH200")

    assert progress["completed_objectives"] == {"a": True}
    assert progress["active_syllabus"] == "MATH200"


@pytest.mark.asyncio
async def test_explicit_null_clears_active_syllabus(database, user_id):
    async with database.get_transaction() as conn:
        await update_progress(conn, user_id, active_syllabus="CS101")

    async with database.get_transaction() as conn:
        progress = await update_progress(conn, user_id, active_syllabus=None)

    assert progress["active_syllabus"] is None


@pytest.mark.asyncio
async def test_empty_update_bumps_last_updated(database, user_id):
    async with database.get_transaction() as conn:
        before = await get_or_create_progress(conn, user_id)

    async with database.get_transaction() as conn:
        after = await update_progress(conn, user_id)

    assert after["last_updated"] >= before["last_updated"]
    assert after["completed_objectives"] == before["completed_objectives"]


@pytest.mark.asyncio
async def test_delete_then_read_recreates_empty(database, user_id):
    async with database.get_transaction() as conn:
        await update_progress(
            conn, user_id, completed_objectives={"a": True}, active_syllabus="CS101"
        )

    async with database.get_transaction() as conn:
        assert await delete_progress(conn, user_id) == 1

    async with database.get_transaction() as conn:
        progress = await get_or_create_progress(conn, user_id)

    assert progress["completed_objectives"] == {}
    assert progress["active_syllabus"] is None


@pytest.mark.asyncio
async def test_delete_unknown_user_raises(database, user_id):
    async with database.get_transaction() as conn:
        with pytest.raises(ProgressNotFoundError):
            await delete_progress(conn, user_id)


@pytest.mark.asyncio
async def test_count_includes_new_record(database, user_id):
    async with database.get_connection() as conn:
        before = await count_progress(conn)

    async with database.get_transaction() as conn:
        await get_or_create_progress(conn, user_id)

    async with database.get_connection() as conn:
        after = await count_progress(conn)

    assert after >= before + 1
