"""SQLite connection management and initialization."""

import logging
from pathlib import Path

import aiosqlite

from popcorn.migrations.runner import run_migrations

logger = logging.getLogger(__name__)


async def connect(db_path: Path) -> aiosqlite.Connection:
    """Open a database connection and run pending migrations."""
    # Ensure data directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    db = await aiosqlite.connect(str(db_path))

    # WAL keeps readers unblocked while the store rewrites a slot
    await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA foreign_keys=ON")
    await db.execute("PRAGMA busy_timeout=5000")

    await db.commit()

    await run_migrations(db)
    logger.info("Opened database at %s", db_path)
    return db


async def close(db: aiosqlite.Connection | None) -> None:
    """Close a database connection if it is open."""
    if db is not None:
        await db.close()
