"""OMDb catalog client: free-text search and per-movie detail lookups.

Every request carries the API key and the configured timeout. Failures are
normalized into the error kinds the controllers understand:

- network errors, timeouts, non-2xx responses and unreadable bodies raise
  TransportError;
- a well-formed ``{"Response": "False", "Error": ...}`` payload raises
  DomainError with the catalog's own message;
- a request made after the client was closed raises CancelledOperation.
"""

import logging

import httpx
from pydantic import ValidationError

from popcorn.config import Settings
from popcorn.errors import CancelledOperation, DomainError, TransportError
from popcorn.models.movie import MovieDetail, SearchResult

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Something went wrong while fetching movies"


class OmdbClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.omdbapi.com/",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "OmdbClient":
        return cls(
            api_key=settings.omdb_api_key,
            base_url=settings.omdb_base_url,
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self):
        self.open()
        return self

    def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )

    async def __aexit__(self, *args):
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(self, params: dict) -> dict:
        """GET the catalog endpoint and return the decoded success payload."""
        if self._client is None or self._client.is_closed:
            raise CancelledOperation("Catalog client is closed")

        try:
            resp = await self._client.get(
                self.base_url, params={"apikey": self.api_key, **params}
            )
        except httpx.TimeoutException as e:
            logger.warning("Catalog request timed out: %s", e)
            raise TransportError("The movie catalog did not respond in time") from e
        except httpx.HTTPError as e:
            logger.warning("Catalog request failed: %s", e)
            raise TransportError(GENERIC_FAILURE) from e

        if not resp.is_success:
            logger.warning("Catalog returned HTTP %d", resp.status_code)
            raise TransportError(GENERIC_FAILURE)

        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError(GENERIC_FAILURE) from e
        if not isinstance(data, dict):
            raise TransportError(GENERIC_FAILURE)

        if data.get("Response") == "False":
            raise DomainError(data.get("Error") or "No result")
        return data

    async def search(self, query: str) -> list[SearchResult]:
        """Search movies by title, preserving the catalog's ordering."""
        data = await self._get({"s": query})
        try:
            return [SearchResult.model_validate(item) for item in data.get("Search") or []]
        except ValidationError as e:
            raise TransportError(GENERIC_FAILURE) from e

    async def get_detail(self, movie_id: str) -> MovieDetail:
        """Fetch the full record for one movie id."""
        data = await self._get({"i": movie_id})
        try:
            return MovieDetail.model_validate(data)
        except ValidationError as e:
            raise TransportError(GENERIC_FAILURE) from e
