"""Popcorn application: builds the controllers from one Settings object."""

import logging

import aiosqlite
import httpx

from popcorn import database
from popcorn.config import Settings
from popcorn.models.movie import WatchedEntry
from popcorn.services.catalog import OmdbClient
from popcorn.services.detail_controller import DetailController
from popcorn.services.search_controller import SearchController
from popcorn.services.store import PersistentStore
from popcorn.services.watched_service import WatchedService

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Keep noisy libraries at WARNING
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


class PopcornApp:
    """Startup and shutdown lifecycle for the whole core.

    Usage::

        async with PopcornApp(Settings()) as app:
            app.search.set_query("batman")
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport
        self._db: aiosqlite.Connection | None = None
        self.catalog: OmdbClient | None = None
        self.watched: WatchedService | None = None
        self.detail: DetailController | None = None
        self.search: SearchController | None = None

    async def __aenter__(self):
        settings = self.settings
        configure_logging(settings.log_level)
        settings.data_dir.mkdir(parents=True, exist_ok=True)

        if not settings.omdb_api_key:
            logger.warning(
                "No OMDb API key configured (POPCORN_OMDB_API_KEY). "
                "Catalog requests will be rejected."
            )

        self._db = await database.connect(settings.db_path)
        self.catalog = OmdbClient.from_settings(settings, self._transport)
        self.catalog.open()

        store: PersistentStore[list[WatchedEntry]] = PersistentStore(self._db, list[WatchedEntry])
        self.watched = WatchedService(store, settings.watched_key)
        await self.watched.hydrate()

        self.detail = DetailController(self.catalog, self.watched, settings)
        self.search = SearchController(self.catalog, settings, detail=self.detail)
        logger.info("Popcorn ready")
        return self

    async def __aexit__(self, *args):
        if self.search is not None:
            self.search.cancel()
            await self.search.wait_idle()
        if self.detail is not None:
            self.detail.close()
            await self.detail.wait_idle()
        if self.catalog is not None:
            await self.catalog.aclose()
        await database.close(self._db)
        self._db = None
        logger.info("Popcorn stopped")
