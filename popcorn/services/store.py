"""Durable typed key/value slots backed by the kv_store table.

Values are validated and serialized with a pydantic TypeAdapter. A slot that
is missing or holds a payload that no longer validates loads as the caller's
default; start-up never fails because of a corrupt slot.
"""

import asyncio
import logging
from typing import Any, Generic, TypeVar

import aiosqlite
from pydantic import TypeAdapter, ValidationError

from popcorn.errors import MalformedPersistedState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PersistentStore(Generic[T]):
    """Reads and writes values of one type under string keys."""

    def __init__(self, db: aiosqlite.Connection, value_type: Any):
        self._db = db
        self._adapter: TypeAdapter[T] = TypeAdapter(value_type)
        self._lock = asyncio.Lock()

    async def load(self, key: str, default: T) -> T:
        """Return the value stored under key, or default if absent or corrupt."""
        async with self._lock:
            cursor = await self._db.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            )
            row = await cursor.fetchone()

        if row is None:
            return default

        try:
            return self._decode(key, row[0])
        except MalformedPersistedState as e:
            logger.warning("%s; using default", e)
            return default

    async def save(self, key: str, value: T) -> None:
        """Serialize value and replace whatever is stored under key."""
        payload = self._adapter.dump_json(value).decode("utf-8")
        async with self._lock:
            await self._db.execute(
                """INSERT INTO kv_store (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET
                       value = excluded.value,
                       updated_at = datetime('now')""",
                (key, payload),
            )
            await self._db.commit()
        logger.debug("Saved %s (%d bytes)", key, len(payload))

    async def delete(self, key: str) -> bool:
        """Remove a slot. Returns True if something was deleted."""
        async with self._lock:
            cursor = await self._db.execute(
                "DELETE FROM kv_store WHERE key = ?", (key,)
            )
            await self._db.commit()
        return cursor.rowcount > 0

    def _decode(self, key: str, raw: str) -> T:
        try:
            return self._adapter.validate_json(raw)
        except ValidationError as e:
            raise MalformedPersistedState(
                key, f"{e.error_count()} validation error(s)"
            ) from e
