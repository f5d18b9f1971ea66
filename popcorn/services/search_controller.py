"""Query to result-list state machine.

A request is issued on every query change that passes the length gate.
Responses can arrive out of order; each one is tagged with the epoch that
issued it and is applied only while that epoch is still current, so the
settled results always belong to the latest query.
"""

import logging

from popcorn.config import Settings
from popcorn.errors import CancelledOperation, CatalogError
from popcorn.models.movie import SearchResult
from popcorn.models.state import SearchState
from popcorn.services.catalog import OmdbClient
from popcorn.services.detail_controller import DetailController
from popcorn.services.epochs import RequestEpochs
from popcorn.services.observable import StateChannel

logger = logging.getLogger(__name__)


class SearchController:
    def __init__(
        self,
        catalog: OmdbClient,
        settings: Settings,
        detail: DetailController | None = None,
    ):
        self._catalog = catalog
        self._min_length = settings.min_query_length
        self._detail = detail
        self._epochs = RequestEpochs("search")
        self.channel: StateChannel[SearchState] = StateChannel(SearchState())

    @property
    def state(self) -> SearchState:
        return self.channel.state

    @property
    def results(self) -> tuple[SearchResult, ...]:
        return self.state.results

    @property
    def result_count(self) -> int:
        return len(self.state.results)

    @property
    def epoch(self) -> int:
        return self._epochs.current

    def set_query(self, query: str) -> None:
        """Apply a query change. Must be called from inside the event loop."""
        if query == self.state.query:
            return
        self._start(query)

    def refresh(self) -> None:
        """Re-issue the current query, e.g. after a transport error."""
        self._start(self.state.query)

    def cancel(self) -> None:
        """Abandon the in-flight search, keeping the current results."""
        if not self._epochs.in_flight:
            return
        self._epochs.advance()
        self.channel.publish(is_loading=False)

    async def wait_idle(self) -> None:
        await self._epochs.wait_idle()

    def _start(self, query: str) -> None:
        epoch = self._epochs.advance()
        if self._detail is not None:
            self._detail.close()

        if len(query) < self._min_length:
            self.channel.publish(query=query, results=(), error=None, is_loading=False)
            return

        self._epochs.start(epoch, self._search(epoch, query))
        self.channel.publish(query=query, error=None, is_loading=True)

    async def _search(self, epoch: int, query: str) -> None:
        try:
            results = await self._catalog.search(query)
        except CancelledOperation:
            if self._epochs.is_current(epoch):
                self.channel.publish(is_loading=False)
            return
        except CatalogError as e:
            if not self._epochs.is_current(epoch):
                logger.debug("Dropping stale error for %r", query)
                return
            logger.info("Search for %r failed: %s", query, e)
            self.channel.publish(results=(), error=str(e), is_loading=False)
            return

        if not self._epochs.is_current(epoch):
            logger.debug("Dropping stale results for %r", query)
            return
        self.channel.publish(results=tuple(results), error=None, is_loading=False)
