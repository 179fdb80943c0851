"""
JWT authentication utilities for the web API.

Security measures implemented:
- HS256 signing algorithm with the configured secret
- Token expiration (24 hours)
- Constant-time comparison of the configured credential pair
- Bearer tokens in the Authorization header

A missing or malformed Authorization header is a 401; a token that is
present but fails verification is a 403. Clients rely on the difference.
"""

import hmac
import logging
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import DEFAULT_USER_ID, Settings, get_settings
from web_api.envelope import ApiError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = 24
JWT_EXPIRES_IN = "24h"

_bearer_scheme = HTTPBearer(auto_error=False)


class AuthError(Exception):
    """Base class for authentication failures."""


class MissingTokenError(AuthError):
    """No bearer token was supplied."""


class InvalidTokenError(AuthError):
    """Token signature is bad or the token has expired."""


class CredentialMismatchError(AuthError):
    """Username/password pair does not match the configured pair."""


def _matches(supplied: str | None, expected: str) -> bool:
    return hmac.compare_digest((supplied or "").encode(), expected.encode())


def check_credentials(settings: Settings, username: str | None, password: str | None) -> None:
    """
    Compare a credential pair against the configured one.

    Both halves are always compared so the failure reveals nothing about
    which half was wrong.

    Raises:
        CredentialMismatchError: On any mismatch, or if no pair is configured
    """
    if not settings.credentials_configured:
        raise CredentialMismatchError("Login is not configured")

    username_ok = _matches(username, settings.auth_username)
    password_ok = _matches(password, settings.auth_password)
    if not (username_ok and password_ok):
        raise CredentialMismatchError("Invalid username or password")


def create_jwt(settings: Settings, username: str, now: datetime | None = None) -> str:
    """
    Create a signed JWT token for the authenticated user.

    Args:
        settings: Supplies the signing secret
        username: The username that logged in
        now: Issue time (defaults to the current time)

    Returns:
        Signed JWT token string
    """
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": DEFAULT_USER_ID,
        "username": username,
        "userId": DEFAULT_USER_ID,
        "timestamp": int(now.timestamp() * 1000),
        "iat": now,
        "exp": now + timedelta(hours=JWT_EXPIRATION_HOURS),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def issue_token(settings: Settings, username: str | None, password: str | None) -> dict:
    """
    Exchange a credential pair for a token.

    Returns:
        Dict with token, expiresIn and user

    Raises:
        CredentialMismatchError: If the pair does not match
    """
    check_credentials(settings, username, password)
    token = create_jwt(settings, username)
    logger.info(f"Issued token for {username}")
    return {
        "token": token,
        "expiresIn": JWT_EXPIRES_IN,
        "user": {"username": username, "userId": DEFAULT_USER_ID},
    }


def verify_jwt(settings: Settings, token: str | None) -> dict:
    """
    Verify and decode a JWT token.

    Args:
        settings: Supplies the signing secret
        token: The JWT token string

    Returns:
        Decoded claims dict

    Raises:
        MissingTokenError: If no token was given
        InvalidTokenError: If the signature is bad or the token expired
    """
    if not token:
        raise MissingTokenError("Access token required")

    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(str(e)) from e


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings the app was built with."""
    return getattr(request.app.state, "settings", None) or get_settings()


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """
    FastAPI dependency to get the current authenticated user.

    Extracts the bearer token from the Authorization header and validates it.
    The decoded claims are also attached to request.state.user.

    Raises:
        ApiError: 401 if the header is missing or malformed, 403 if the
            token is invalid or expired
    """
    token = credentials.credentials if credentials else None
    try:
        claims = verify_jwt(settings, token)
    except MissingTokenError:
        _log_auth_failure(request, reason="missing_token")
        raise ApiError(401, "Access token required")
    except InvalidTokenError as e:
        _log_auth_failure(request, reason=f"invalid_token ({e})")
        raise ApiError(403, "Invalid or expired token")

    request.state.user = claims
    return claims


def _log_auth_failure(request: Request, reason: str) -> None:
    client_ip = request.client.host if request.client else "unknown"
    logger.warning(
        "Auth failure: reason=%s ip=%s path=%s", reason, client_ip, request.url.path
    )
