"""
Centralized configuration for the Syllabus Tracker backend.

Settings are read from the environment once at startup and passed to the
components that need them.
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

logger = logging.getLogger(__name__)

# Fallback signing secret used when JWT_SECRET is not set.
# Constant so tokens stay verifiable across restarts; never empty.
DEFAULT_JWT_SECRET = "your-secret-key"

DEFAULT_PORT = 5000

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:5500",
    "http://127.0.0.1:5500",
    "https://crishav.com.np",
)

# Identity used when a caller omits the userId path segment
DEFAULT_USER_ID = "default_user"

PRODUCTION_ENVIRONMENTS = ("production", "prod")


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once by load_settings()."""

    port: int = DEFAULT_PORT
    database_url: str | None = None
    jwt_secret: str = DEFAULT_JWT_SECRET
    auth_username: str | None = None
    auth_password: str | None = None
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    environment: str = "development"
    sql_echo: bool = False
    sentry_dsn: str | None = None
    using_default_secret: bool = field(default=True, compare=False)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in PRODUCTION_ENVIRONMENTS

    @property
    def credentials_configured(self) -> bool:
        """An unset or empty pair never matches a login attempt."""
        return bool(self.auth_username) and bool(self.auth_password)

    @property
    def async_database_url(self) -> str:
        """
        Database URL with the asyncpg driver selected.

        Hosted Postgres providers hand out postgresql:// URLs;
        SQLAlchemy needs postgresql+asyncpg:// for the async engine.
        """
        if not self.database_url:
            raise ValueError(
                "DATABASE_URL environment variable must be set to a PostgreSQL "
                "connection string"
            )
        if self.database_url.startswith("postgresql://"):
            return self.database_url.replace(
                "postgresql://", "postgresql+asyncpg://", 1
            )
        if self.database_url.startswith("postgres://"):
            return self.database_url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self.database_url


def _parse_origins(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return DEFAULT_ALLOWED_ORIGINS
    origins = tuple(origin.strip().rstrip("/") for origin in raw.split(","))
    return tuple(origin for origin in origins if origin)


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        A frozen Settings instance
    """
    env = os.environ if environ is None else environ

    secret = env.get("JWT_SECRET") or ""
    environment = env.get("APP_ENV") or env.get("NODE_ENV") or "development"

    return Settings(
        port=int(env.get("PORT") or DEFAULT_PORT),
        database_url=env.get("DATABASE_URL") or None,
        jwt_secret=secret or DEFAULT_JWT_SECRET,
        auth_username=env.get("AUTH_USERNAME") or None,
        auth_password=env.get("AUTH_PASSWORD") or None,
        allowed_origins=_parse_origins(env.get("ALLOWED_ORIGINS")),
        environment=environment,
        sql_echo=env.get("SQL_ECHO", "").lower() == "true",
        sentry_dsn=env.get("SENTRY_DSN") or None,
        using_default_secret=not secret,
    )


@lru_cache
def get_settings() -> Settings:
    """Settings for this process, loaded on first use."""
    return load_settings()


# Required environment variables
# Format: (name, description, required_in_production)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string", True),
    ("JWT_SECRET", "Secret key for signing tokens", True),
    ("AUTH_USERNAME", "Login username", False),
    ("AUTH_PASSWORD", "Login password", False),
]


def check_required_env_vars(
    settings: Settings, environ: dict[str, str] | None = None
) -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    env = os.environ if environ is None else environ
    warnings = []
    errors = []

    for name, description, required_in_production in REQUIRED_ENV_VARS:
        if env.get(name):
            continue
        if settings.is_production and required_in_production:
            errors.append(f"  ✗ {name}: Not set ({description})")
        else:
            warnings.append(f"  ⚠ {name}: Not set ({description})")

    for error in errors:
        logger.error(error)

    return not errors, warnings
