#!/usr/bin/env python
"""
Seed the syllabus catalog from a JSON file.

The API never writes syllabi; this script is how they get there.
The file must contain a list of documents with courseTitle, courseCode,
creditHours and units.

Usage:
    python scripts/seed_syllabi.py syllabi.json [--replace] [--allow-remote]
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv(".env.local")
load_dotenv()

from core.config import get_settings
from core.database import close_engine, configure, get_transaction, init_database
from core.syllabi import count_syllabi, insert_syllabi
from db_safety import check_database_safety

REQUIRED_KEYS = ("courseTitle", "courseCode")


def load_documents(path: Path) -> list[dict]:
    """Read and sanity-check the seed file."""
    with open(path, encoding="utf-8") as f:
        documents = json.load(f)

    if isinstance(documents, dict):
        documents = [documents]
    if not isinstance(documents, list):
        raise ValueError("Seed file must contain a JSON object or list of objects")

    for index, doc in enumerate(documents):
        missing = [key for key in REQUIRED_KEYS if key not in doc]
        if missing:
            raise ValueError(f"Document {index} is missing: {', '.join(missing)}")
    return documents


async def seed(documents: list[dict], replace: bool) -> None:
    await init_database()
    try:
        async with get_transaction() as conn:
            inserted = await insert_syllabi(conn, documents, replace=replace)
            total = await count_syllabi(conn)
    finally:
        await close_engine()

    print(f"Inserted {inserted} syllabi ({total} total)")


def main():
    parser = argparse.ArgumentParser(description="Seed the syllabus catalog")
    parser.add_argument("file", type=Path, help="JSON file with syllabus documents")
    parser.add_argument(
        "--replace",
        action="store_true",
        help="Delete existing syllabi before inserting",
    )
    parser.add_argument(
        "--allow-remote",
        action="store_true",
        help="Allow running against a non-local database",
    )
    args = parser.parse_args()

    settings = get_settings()
    check_database_safety(settings, allow_remote=args.allow_remote)
    configure(settings)

    try:
        documents = load_documents(args.file)
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    asyncio.run(seed(documents, args.replace))


if __name__ == "__main__":
    main()
