"""
Syllabus Tracker backend entry point.

Architecture:
- One Python process, one asyncio event loop, FastAPI served by uvicorn
- Stateless per request; the only shared resource is the database pool

We use FastAPI's lifespan to check the database before serving. If the
database cannot be reached at startup the process exits instead of
serving traffic.

Run with: python main.py [--port PORT]
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

project_root = Path(__file__).parent

from dotenv import load_dotenv

# Load .env.local first (if exists), then .env as fallback
# .env.local is gitignored and used for local dev overrides
load_dotenv(project_root / ".env.local")  # Local overrides (gitignored)
load_dotenv()  # Fallback to .env

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import database
from core.config import Settings, check_required_env_vars, get_settings
from core.database import check_connection, close_engine, init_database
from web_api.envelope import register_error_handlers
from web_api.routes.auth import router as auth_router
from web_api.routes.progress import router as progress_router
from web_api.routes.syllabi import router as syllabi_router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

ENDPOINTS = [
    "GET  / - Server status",
    "GET  /api/health - Health check",
    "POST /api/auth/login - Authentication",
    "POST /api/auth/verify - Verify token",
    "GET  /api/syllabi - Get all syllabi (protected)",
    "GET  /api/progress/:userId - Load progress (protected)",
    "POST /api/progress/:userId - Save progress (protected)",
    "DELETE /api/progress/:userId - Delete progress (protected)",
    "GET  /api/stats - Database statistics (protected)",
]


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def init_sentry(settings: Settings) -> None:
    """Enable error reporting when a DSN is configured."""
    if not settings.sentry_dsn:
        return
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=VERSION,
    )
    logger.info("Sentry error reporting enabled")


def log_startup_banner(settings: Settings) -> None:
    logger.info("Syllabus Tracker Backend Server started")
    logger.info(f"Server running on http://localhost:{settings.port}")
    logger.info(f"Environment: {settings.environment}")
    logger.info("Available endpoints:")
    for endpoint in ENDPOINTS:
        logger.info(f"   {endpoint}")
    logger.info("CORS enabled for:")
    for origin in settings.allowed_origins:
        logger.info(f"   - {origin}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Verifies the database (fatal on failure) and creates missing tables
    before the app accepts requests.
    """
    settings: Settings = app.state.settings

    ok, warnings = check_required_env_vars(settings)
    for warning in warnings:
        logger.warning(warning)
    if not ok:
        raise RuntimeError("Required environment variables are missing")
    if settings.using_default_secret:
        logger.warning("JWT_SECRET not set, signing tokens with the default secret")

    database.configure(settings)
    try:
        await init_database()
    except database.BackendUnavailableError:
        logger.exception("Database connection failed")
        raise
    logger.info("Connected to database successfully")
    log_startup_banner(settings)

    yield

    logger.info("Shutting down...")
    await close_engine()  # Close database connections


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI app around a Settings instance."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Syllabus Tracker API",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_error_handlers(app, production=settings.is_production)

    # Include routers
    app.include_router(auth_router)
    app.include_router(progress_router)
    app.include_router(syllabi_router)

    @app.get("/")
    async def root():
        """Server status (public)."""
        return {
            "status": "OK",
            "message": "Syllabus Tracker Backend Server is Running!",
            "version": VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/api/health")
    async def health():
        """Health check with database connectivity (public)."""
        connected = await check_connection()
        return {
            "status": "OK",
            "message": "Syllabus Tracker Backend is running",
            "database": "Connected" if connected else "Disconnected",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import argparse
    import uvicorn

    configure_logging()
    settings = get_settings()
    init_sentry(settings)

    parser = argparse.ArgumentParser(description="Syllabus Tracker Backend Server")
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to run the server on (default: {settings.port})",
    )
    args = parser.parse_args()

    # Pass app object directly (not string) to avoid module reimport issues
    # A failed lifespan startup makes uvicorn exit non-zero
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=args.port,
    )
