"""
Syllabus catalog and stats routes.

Endpoints:
- GET /api/syllabi - List every syllabus document
- GET /api/stats - Aggregate counts
"""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from core.config import Settings
from core.database import get_connection
from core.progress import count_progress
from core.syllabi import count_syllabi, list_syllabi
from web_api.auth import get_app_settings, get_current_user
from web_api.envelope import backend_error, success

router = APIRouter(tags=["syllabi"], dependencies=[Depends(get_current_user)])


@router.get("/api/syllabi")
async def get_syllabi(settings: Settings = Depends(get_app_settings)) -> dict:
    """Return the full catalog. No filtering or pagination."""
    try:
        async with get_connection() as conn:
            documents = await list_syllabi(conn)
    except (SQLAlchemyError, OSError) as e:
        raise backend_error(
            e, "Failed to fetch syllabi", production=settings.is_production
        )
    return success(data=documents)


@router.get("/api/stats")
async def get_stats(settings: Settings = Depends(get_app_settings)) -> dict:
    """Count progress records and syllabi."""
    try:
        async with get_connection() as conn:
            total_users = await count_progress(conn)
            total_syllabi = await count_syllabi(conn)
    except (SQLAlchemyError, OSError) as e:
        raise backend_error(
            e, "Failed to get database stats", production=settings.is_production
        )
    return success(data={"totalUsers": total_users, "totalSyllabi": total_syllabi})
