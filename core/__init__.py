"""
Core business logic - transport-agnostic.
Used by the web API and by the maintenance scripts.
"""

# Configuration
from .config import Settings, get_settings, load_settings, DEFAULT_USER_ID

# Database (SQLAlchemy)
from .database import (
    get_connection, get_transaction, get_engine, close_engine, is_configured,
    init_database, check_connection, BackendUnavailableError,
)

# Progress store
from .progress import (
    get_or_create_progress, update_progress, delete_progress, count_progress,
    ProgressNotFoundError,
)

# Syllabus catalog
from .syllabi import list_syllabi, count_syllabi

__all__ = [
    # Config
    'Settings', 'get_settings', 'load_settings', 'DEFAULT_USER_ID',
    # Database (SQLAlchemy)
    'get_connection', 'get_transaction', 'get_engine', 'close_engine', 'is_configured',
    'init_database', 'check_connection', 'BackendUnavailableError',
    # Progress
    'get_or_create_progress', 'update_progress', 'delete_progress', 'count_progress',
    'ProgressNotFoundError',
    # Syllabi
    'list_syllabi', 'count_syllabi',
]
