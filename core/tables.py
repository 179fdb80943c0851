"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    Table,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP

# Naming convention for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. USER PROGRESS
# =====================================================
# One row per identity; the primary key is the uniqueness constraint
# that GetOrCreate and the upserts conflict on.
user_progress = Table(
    "user_progress",
    metadata,
    Column("user_id", Text, primary_key=True),
    # Objective id -> completion marker; shape is never validated
    Column(
        "completed_objectives",
        JSONB,
        server_default=text("'{}'::jsonb"),
        nullable=False,
    ),
    Column("active_syllabus", Text),
    Column(
        "last_updated",
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    ),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
)


# =====================================================
# 2. SYLLABI
# =====================================================
# Seeded out-of-band (scripts/seed_syllabi.py); the API only reads it.
syllabi = Table(
    "syllabi",
    metadata,
    Column("syllabus_id", Integer, primary_key=True, autoincrement=True),
    Column("course_title", Text),
    Column("course_code", Text),
    Column("credit_hours", JSONB),  # Free-form, e.g. {"theory": 3, "lab": 1}
    Column("units", JSONB, server_default=text("'[]'::jsonb"), nullable=False),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
)
