"""
Database safety checks for scripts.

Ensures scripts only run against known databases, with explicit
protection against accidentally running on production.
"""

import sys

from core.config import Settings

# Patterns that indicate a local database (any dev machine)
LOCAL_PATTERNS = [
    "localhost",
    "127.0.0.1",
    "host.docker.internal",
    "0.0.0.0",
    "::1",
]


def check_database_safety(settings: Settings, allow_remote: bool = False) -> str:
    """
    Check that we're connected to an allowed database.

    Returns "local" or "remote" if allowed.
    Exits with error if production, unset, or remote without allow_remote.
    """
    db_url = settings.database_url or ""

    if not db_url:
        print("ERROR: DATABASE_URL not set")
        sys.exit(1)

    if settings.is_production:
        print(f"ERROR: This script cannot run with environment '{settings.environment}'!")
        print("Production databases are explicitly blocked for safety.")
        sys.exit(1)

    for pattern in LOCAL_PATTERNS:
        if pattern in db_url:
            print("Database: local")
            return "local"

    if allow_remote:
        print("Database: remote (allowed by --allow-remote)")
        return "remote"

    print("ERROR: Refusing to run against a remote database")
    print("Pass --allow-remote if this is intentional.")
    sys.exit(1)
