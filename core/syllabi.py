"""Read-only access to the syllabus catalog."""

from typing import Any

from sqlalchemy import func, insert, select, delete
from sqlalchemy.ext.asyncio import AsyncConnection

from core.tables import syllabi


def to_syllabus_document(row: dict[str, Any]) -> dict[str, Any]:
    """Project a stored row onto the public document shape.

    Storage metadata (id, created/updated timestamps) is dropped.
    """
    return {
        "courseTitle": row["course_title"],
        "courseCode": row["course_code"],
        "creditHours": row["credit_hours"],
        "units": row["units"] if row["units"] is not None else [],
    }


async def list_syllabi(conn: AsyncConnection) -> list[dict[str, Any]]:
    """Return every syllabus document in insertion order."""
    result = await conn.execute(select(syllabi).order_by(syllabi.c.syllabus_id))
    return [to_syllabus_document(row) for row in result.mappings()]


async def count_syllabi(conn: AsyncConnection) -> int:
    """Total number of syllabus documents."""
    result = await conn.execute(select(func.count()).select_from(syllabi))
    return result.scalar() or 0


async def insert_syllabi(
    conn: AsyncConnection,
    documents: list[dict[str, Any]],
    *,
    replace: bool = False,
) -> int:
    """Insert syllabus documents (out-of-band seeding only).

    Args:
        documents: Dicts with courseTitle, courseCode, creditHours, units
        replace: Delete all existing syllabi first

    Returns count of documents inserted.
    """
    if replace:
        await conn.execute(delete(syllabi))
    if not documents:
        return 0

    rows = [
        {
            "course_title": doc.get("courseTitle"),
            "course_code": doc.get("courseCode"),
            "credit_hours": doc.get("creditHours"),
            "units": doc.get("units") or [],
        }
        for doc in documents
    ]
    await conn.execute(insert(syllabi), rows)
    return len(rows)
