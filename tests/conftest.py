"""Shared test fixtures for all test modules."""

import asyncio
import json
import os
import tempfile

import httpx
import pytest

from helpers import BATMAN_DETAIL, BATMAN_SEARCH, NOT_FOUND

# ── Environment overrides (must be set before importing popcorn modules) ────
_tmp = tempfile.mkdtemp(prefix="popcorn_pytest_")
os.environ["POPCORN_DATA_DIR"] = _tmp
os.environ["POPCORN_DB_PATH"] = os.path.join(_tmp, "test.db")
os.environ["POPCORN_OMDB_API_KEY"] = "pytest-key"
os.environ["POPCORN_OMDB_BASE_URL"] = "https://catalog.test/"


class FakeCatalogServer:
    """Routes OMDb-style requests to canned payloads, optionally gated per query.

    ``gates`` maps a search term or movie id to an asyncio.Event; the
    response for that key is held back until the event is set.
    """

    def __init__(self):
        self.searches: dict[str, dict] = {}
        self.details: dict[str, dict] = {}
        self.statuses: dict[str, int] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.requests: list[httpx.Request] = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params
        key = params.get("s") or params.get("i") or ""

        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()

        status = self.statuses.get(key, 200)
        if "s" in params:
            payload = self.searches.get(key, NOT_FOUND)
        else:
            payload = self.details.get(key, {"Response": "False", "Error": "Incorrect IMDb ID."})
        return httpx.Response(status, content=json.dumps(payload).encode())

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def queries(self) -> list[str]:
        return [r.url.params.get("s") for r in self.requests if "s" in r.url.params]


@pytest.fixture
def catalog_server():
    server = FakeCatalogServer()
    server.searches["batman"] = BATMAN_SEARCH
    server.details["tt1"] = BATMAN_DETAIL
    return server


@pytest.fixture
def settings(tmp_path):
    from popcorn.config import Settings

    return Settings(data_dir=tmp_path, db_path=tmp_path / "popcorn.db")


@pytest.fixture
async def db(settings):
    from popcorn import database

    conn = await database.connect(settings.db_path)
    yield conn
    await database.close(conn)


@pytest.fixture
async def catalog(catalog_server, settings):
    from popcorn.services.catalog import OmdbClient

    async with OmdbClient.from_settings(settings, catalog_server.transport) as client:
        yield client


@pytest.fixture
async def watched(db, settings):
    from popcorn.models.movie import WatchedEntry
    from popcorn.services.store import PersistentStore
    from popcorn.services.watched_service import WatchedService

    service = WatchedService(PersistentStore(db, list[WatchedEntry]), settings.watched_key)
    await service.hydrate()
    return service


@pytest.fixture
def detail(catalog, watched, settings):
    from popcorn.services.detail_controller import DetailController

    return DetailController(catalog, watched, settings)


@pytest.fixture
def search(catalog, settings, detail):
    from popcorn.services.search_controller import SearchController

    return SearchController(catalog, settings, detail=detail)
