"""Progress tracking API routes.

Endpoints:
- GET /api/progress/{user_id?} - Load progress (created empty on first access)
- POST /api/progress/{user_id?} - Save a partial update
- DELETE /api/progress/{user_id?} - Remove progress

The user_id segment is optional; when omitted the default identity is used.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError

from core.config import DEFAULT_USER_ID, Settings
from core.database import get_transaction
from core.progress import (
    ProgressNotFoundError,
    delete_progress,
    get_or_create_progress,
    update_progress,
)
from web_api.auth import get_app_settings, get_current_user
from web_api.envelope import ApiError, backend_error, success

router = APIRouter(
    prefix="/api/progress",
    tags=["progress"],
    dependencies=[Depends(get_current_user)],
)


class ProgressUpdateRequest(BaseModel):
    """Partial update. Field presence matters, not just the value:
    an omitted field is left alone, an explicit null clears it."""

    completedObjectives: dict[str, Any] | None = None
    activeSyllabus: str | None = None

    @field_validator("activeSyllabus", mode="before")
    @classmethod
    def _number_as_string(cls, value: Any) -> Any:
        # Numeric syllabus ids are stored in their string form
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


def progress_payload(progress: dict) -> dict:
    """Public shape of a progress record."""
    last_updated = progress.get("last_updated")
    return {
        "userId": progress["user_id"],
        "completedObjectives": progress.get("completed_objectives") or {},
        "activeSyllabus": progress.get("active_syllabus"),
        "lastUpdated": last_updated.isoformat() if last_updated else None,
    }


def patch_from_request(body: ProgressUpdateRequest) -> dict[str, Any]:
    """Keyword changes for update_progress, limited to fields the client sent."""
    changes: dict[str, Any] = {}
    if "completedObjectives" in body.model_fields_set:
        changes["completed_objectives"] = body.completedObjectives
    if "activeSyllabus" in body.model_fields_set:
        changes["active_syllabus"] = body.activeSyllabus
    return changes


async def _load(user_id: str, settings: Settings) -> dict:
    try:
        async with get_transaction() as conn:
            progress = await get_or_create_progress(conn, user_id)
    except (SQLAlchemyError, OSError) as e:
        raise backend_error(
            e, "Failed to load progress", production=settings.is_production
        )
    return success(data=progress_payload(progress))


async def _save(
    user_id: str, body: ProgressUpdateRequest | None, settings: Settings
) -> dict:
    if body is None:
        body = ProgressUpdateRequest()
    try:
        async with get_transaction() as conn:
            progress = await update_progress(conn, user_id, **patch_from_request(body))
    except (SQLAlchemyError, OSError) as e:
        raise backend_error(
            e, "Failed to save progress", production=settings.is_production
        )
    return success(
        message="Progress saved successfully", data=progress_payload(progress)
    )


async def _remove(user_id: str, settings: Settings) -> dict:
    try:
        async with get_transaction() as conn:
            await delete_progress(conn, user_id)
    except ProgressNotFoundError:
        raise ApiError(404, "Progress not found")
    except (SQLAlchemyError, OSError) as e:
        raise backend_error(
            e, "Failed to delete progress", production=settings.is_production
        )
    return success(message="Progress deleted successfully")


@router.get("")
async def get_default_progress(settings: Settings = Depends(get_app_settings)):
    """Load progress for the default identity."""
    return await _load(DEFAULT_USER_ID, settings)


@router.get("/{user_id}")
async def get_progress(user_id: str, settings: Settings = Depends(get_app_settings)):
    """Load progress for a user, creating an empty record on first access."""
    return await _load(user_id, settings)


@router.post("")
async def save_default_progress(
    body: ProgressUpdateRequest | None = None,
    settings: Settings = Depends(get_app_settings),
):
    """Save progress for the default identity."""
    return await _save(DEFAULT_USER_ID, body, settings)


@router.post("/{user_id}")
async def save_progress(
    user_id: str,
    body: ProgressUpdateRequest | None = None,
    settings: Settings = Depends(get_app_settings),
):
    """Apply a partial update.

    completedObjectives, when sent, replaces the whole mapping.
    """
    return await _save(user_id, body, settings)


@router.delete("")
async def delete_default_progress(settings: Settings = Depends(get_app_settings)):
    """Delete progress for the default identity."""
    return await _remove(DEFAULT_USER_ID, settings)


@router.delete("/{user_id}")
async def remove_progress(
    user_id: str, settings: Settings = Depends(get_app_settings)
):
    """Delete a user's progress. 404 if there is none."""
    return await _remove(user_id, settings)
