"""
Uniform response envelope for the web API.

Every response body, success or failure, has the shape
{success, message?, data?, error?}. Handlers return success() dicts and
raise ApiError; the handlers registered here render everything else.
"""

import logging
from typing import Any

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error that maps directly onto an HTTP status and envelope."""

    def __init__(self, status_code: int, message: str, error: str | None = None):
        self.status_code = status_code
        self.message = message
        self.error = error
        super().__init__(message)


def success(data: Any = None, message: str | None = None, **extra: Any) -> dict:
    """Build a success envelope. Extra keys are merged at the top level."""
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def failure(message: str, error: str | None = None) -> dict:
    """Build a failure envelope."""
    body: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body


def backend_error(exc: Exception, message: str, *, production: bool) -> ApiError:
    """
    Wrap a persistence failure in a 500 ApiError.

    The exception text is only exposed outside production.
    """
    logger.error(f"{message}: {exc}", exc_info=exc)
    return ApiError(500, message, error=None if production else str(exc))


def register_error_handlers(app: FastAPI, *, production: bool) -> None:
    """Render every error the app can raise as an envelope."""

    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=failure(exc.message, exc.error),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        status_code = exc.status_code
        # Unrouted paths and unrouted methods share the not-found answer
        if status_code in (404, 405):
            status_code = 404
            message = "API endpoint not found"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=status_code,
            content=failure(message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = None if production else str(exc.errors())
        return JSONResponse(
            status_code=400,
            content=failure("Invalid request body", error),
        )

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Server error on {request.method} {request.url.path}")
        sentry_sdk.capture_exception(exc)
        return JSONResponse(
            status_code=500,
            content=failure(
                "Internal server error",
                "Something went wrong" if production else str(exc),
            ),
        )
