"""Schema migrations for the popcorn database.

Each entry in MIGRATIONS names a module exposing ``async upgrade(db)``.
Applied names are recorded in ``_migrations`` only after the upgrade
succeeds, so a failed migration is retried on the next start.
"""

import importlib
import logging

import aiosqlite

logger = logging.getLogger(__name__)

MIGRATIONS = [
    "popcorn.migrations.m001_initial",
]


async def _ensure_tracking_table(db: aiosqlite.Connection) -> None:
    await db.execute("""
        CREATE TABLE IF NOT EXISTS _migrations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            applied_at TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)
    await db.commit()


async def pending_migrations(db: aiosqlite.Connection) -> list[str]:
    """Names from MIGRATIONS not yet recorded, in declaration order."""
    await _ensure_tracking_table(db)
    async with db.execute("SELECT name FROM _migrations") as cursor:
        done = {row[0] async for row in cursor}
    return [name for name in MIGRATIONS if name not in done]


async def run_migrations(db: aiosqlite.Connection) -> list[str]:
    """Bring the schema up to date. Returns the names applied by this call."""
    pending = await pending_migrations(db)
    if not pending:
        logger.debug("Schema is current (%d migrations)", len(MIGRATIONS))
        return []

    for name in pending:
        try:
            await importlib.import_module(name).upgrade(db)
            await db.execute("INSERT INTO _migrations (name) VALUES (?)", (name,))
            await db.commit()
        except Exception:
            await db.rollback()
            logger.error("Migration %s failed; schema left at previous version", name)
            raise
        logger.info("Applied migration %s", name)
    return pending
