"""Progress tracking service.

Owns the per-user progress record: which learning objectives are complete
and which syllabus is active. Records are created lazily on first read or
write, so every identity is valid from first contact.

Concurrent writers to the same user are not coordinated: whichever
statement commits last wins.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncConnection

from core.tables import user_progress

logger = logging.getLogger(__name__)

# Patchable fields (keyword name -> column name)
PATCHABLE_FIELDS = {
    "completed_objectives": "completed_objectives",
    "active_syllabus": "active_syllabus",
}


class ProgressNotFoundError(Exception):
    """No progress record exists for the given user."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Progress not found for user: {user_id}")


def build_patch_values(changes: dict[str, Any]) -> dict[str, Any]:
    """Translate a partial update into column values.

    Only keys present in ``changes`` are written. ``completed_objectives``
    replaces the whole mapping; a None value clears it to ``{}``.
    ``active_syllabus`` is written as given, so an explicit None clears it.

    Raises:
        ValueError: If ``changes`` names a field that cannot be patched
    """
    unknown = set(changes) - set(PATCHABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown progress fields: {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {}
    if "completed_objectives" in changes:
        values["completed_objectives"] = dict(changes["completed_objectives"] or {})
    if "active_syllabus" in changes:
        values["active_syllabus"] = changes["active_syllabus"]
    return values


async def get_or_create_progress(conn: AsyncConnection, user_id: str) -> dict:
    """Get the progress record for a user, creating an empty one if absent.

    Returns dict with: user_id, completed_objectives, active_syllabus,
    last_updated, created_at, updated_at

    Uses INSERT ... ON CONFLICT DO NOTHING so two concurrent first reads
    for the same user cannot both insert.
    """
    stmt = (
        pg_insert(user_progress)
        .values(user_id=user_id)
        .on_conflict_do_nothing(index_elements=["user_id"])
        .returning(user_progress)
    )
    result = await conn.execute(stmt)
    row = result.mappings().first()

    if row:
        logger.info(f"Created new progress record for user: {user_id}")
    else:
        result = await conn.execute(
            select(user_progress).where(user_progress.c.user_id == user_id)
        )
        row = result.mappings().first()

    progress = dict(row)
    logger.info(
        f"Progress loaded for user {user_id}: "
        f"{len(progress['completed_objectives'] or {})} objectives completed, "
        f"active syllabus {progress['active_syllabus']}"
    )
    # No explicit commit - let the caller's transaction context handle it
    return progress


async def update_progress(
    conn: AsyncConnection,
    user_id: str,
    **changes: Any,
) -> dict:
    """Apply a partial update, creating the record first if needed.

    Args:
        conn: Open connection (caller owns the transaction)
        user_id: Identity the record is keyed on
        **changes: Any of completed_objectives, active_syllabus. Omitted
            fields are left untouched.

    Returns the updated progress record. last_updated is always bumped,
    even when no field changed.
    """
    values = build_patch_values(changes)
    now = datetime.now(timezone.utc)
    values["last_updated"] = now
    values["updated_at"] = now

    stmt = pg_insert(user_progress).values(user_id=user_id, **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id"],
        set_=values,
    ).returning(user_progress)

    result = await conn.execute(stmt)
    progress = dict(result.mappings().first())
    logger.info(
        f"Progress saved for user {user_id}: "
        f"{len(progress['completed_objectives'] or {})} objectives completed, "
        f"active syllabus {progress['active_syllabus']}"
    )
    return progress


async def delete_progress(conn: AsyncConnection, user_id: str) -> int:
    """Delete a user's progress record.

    Returns the number of records deleted.

    Raises:
        ProgressNotFoundError: If the user has no progress record
    """
    result = await conn.execute(
        delete(user_progress).where(user_progress.c.user_id == user_id)
    )
    if result.rowcount == 0:
        raise ProgressNotFoundError(user_id)

    logger.info(f"Progress deleted for user: {user_id}")
    return result.rowcount


async def count_progress(conn: AsyncConnection) -> int:
    """Total number of progress records."""
    result = await conn.execute(select(func.count()).select_from(user_progress))
    return result.scalar() or 0
