"""Watched list management: add, remove, lookups and summary statistics."""

import asyncio
import logging

from popcorn.errors import DuplicateEntry, MalformedPersistedState
from popcorn.models.movie import WatchedEntry, WatchedSummary
from popcorn.models.state import WatchedState
from popcorn.services.observable import StateChannel
from popcorn.services.store import PersistentStore

logger = logging.getLogger(__name__)


def _mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


class WatchedService:
    """Owns the watched collection and its storage slot.

    Each mutation writes the new collection once and only then swaps it in,
    so readers never see a state that failed to persist.
    """

    def __init__(self, store: PersistentStore[list[WatchedEntry]], key: str = "watched"):
        self._store = store
        self._key = key
        self._lock = asyncio.Lock()
        self.channel: StateChannel[WatchedState] = StateChannel(WatchedState())

    async def hydrate(self) -> None:
        """Load the persisted collection; corrupt or missing data yields an empty list."""
        entries = await self._store.load(self._key, [])
        ids = [e.id for e in entries]
        if len(set(ids)) != len(ids):
            logger.warning(
                "%s; using default",
                MalformedPersistedState(self._key, "duplicate movie ids"),
            )
            entries = []
        self.channel.publish(entries=tuple(entries))
        logger.info("Loaded %d watched movies", len(entries))

    @property
    def entries(self) -> tuple[WatchedEntry, ...]:
        return self.channel.state.entries

    def __len__(self) -> int:
        return len(self.entries)

    def contains(self, movie_id: str) -> bool:
        return any(e.id == movie_id for e in self.entries)

    def get(self, movie_id: str) -> WatchedEntry | None:
        for entry in self.entries:
            if entry.id == movie_id:
                return entry
        return None

    async def add(self, entry: WatchedEntry) -> WatchedEntry:
        """Append an entry and persist. Raises DuplicateEntry if the id exists."""
        async with self._lock:
            if self.contains(entry.id):
                raise DuplicateEntry(entry.id)

            updated = [*self.entries, entry]
            await self._store.save(self._key, updated)
            self.channel.publish(entries=tuple(updated))

        logger.info("Added %s (%s) to watched list", entry.id, entry.title)
        return entry

    async def remove(self, movie_id: str) -> bool:
        """Remove an entry by id. Absent ids are a no-op. Returns True if removed."""
        async with self._lock:
            updated = [e for e in self.entries if e.id != movie_id]
            if len(updated) == len(self.entries):
                return False

            await self._store.save(self._key, updated)
            self.channel.publish(entries=tuple(updated))

        logger.info("Removed %s from watched list", movie_id)
        return True

    def summary_statistics(self) -> WatchedSummary:
        entries = self.entries
        return WatchedSummary(
            count=len(entries),
            avg_external_rating=_mean([e.external_rating for e in entries]),
            avg_user_rating=_mean([e.user_rating for e in entries]),
            avg_runtime=_mean([e.runtime_minutes for e in entries]),
        )
