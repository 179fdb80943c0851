"""
Authentication routes.

Endpoints:
- POST /api/auth/login - Exchange the configured credential pair for a token
- POST /api/auth/verify - Validate a bearer token and echo its claims
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from core.config import Settings
from web_api.auth import (
    CredentialMismatchError,
    get_app_settings,
    get_current_user,
    issue_token,
)
from web_api.envelope import ApiError, success

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Schema for a login attempt."""

    username: str | None = None
    password: str | None = None


@router.post("/login")
async def login(
    body: LoginRequest,
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """
    Exchange a username/password pair for a 24-hour token.

    Bad username and bad password produce the same response.
    """
    try:
        issued = issue_token(settings, body.username, body.password)
    except CredentialMismatchError:
        raise ApiError(401, "Invalid username or password")

    return success(message="Authentication successful", **issued)


@router.post("/verify")
async def verify(user: dict = Depends(get_current_user)) -> dict:
    """Return the decoded claims of a valid token."""
    return success(message="Token is valid", user=user)
