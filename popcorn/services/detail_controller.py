"""Selected movie state: detail fetching, local rating and promotion to watched."""

import logging

from popcorn.config import Settings
from popcorn.errors import CancelledOperation, CatalogError, DuplicateEntry, RuntimeParseError
from popcorn.models.movie import MovieDetail, WatchedEntry, parse_rating, parse_runtime_minutes
from popcorn.models.state import DetailState
from popcorn.services.catalog import OmdbClient
from popcorn.services.epochs import RequestEpochs
from popcorn.services.observable import StateChannel
from popcorn.services.watched_service import WatchedService

logger = logging.getLogger(__name__)


def build_watched_entry(detail: MovieDetail, user_rating: int) -> WatchedEntry:
    """Promote a loaded detail plus the user's rating into a WatchedEntry.

    Unparseable runtime or rating text becomes 0 instead of failing the commit.
    """
    try:
        runtime_minutes = parse_runtime_minutes(detail.runtime)
    except RuntimeParseError as e:
        logger.warning("%s for %s; storing 0", e, detail.id)
        runtime_minutes = 0

    try:
        external_rating = parse_rating(detail.imdb_rating)
    except RuntimeParseError as e:
        logger.warning("%s for %s; storing 0", e, detail.id)
        external_rating = 0.0

    return WatchedEntry(
        id=detail.id,
        title=detail.title,
        year=detail.year,
        poster_url=detail.poster_url,
        runtime_minutes=runtime_minutes,
        external_rating=external_rating,
        user_rating=user_rating,
    )


class DetailController:
    """Tracks the selected movie id and keeps its detail record in sync.

    Selecting a new id discards the old detail and cancels its fetch; a fetch
    that completes after the selection moved on is dropped without touching
    state.
    """

    def __init__(self, catalog: OmdbClient, watched: WatchedService, settings: Settings):
        self._catalog = catalog
        self._watched = watched
        self._max_rating = settings.max_rating
        self._app_title = settings.app_title
        self._epochs = RequestEpochs("detail")
        self.channel: StateChannel[DetailState] = StateChannel(DetailState())

    @property
    def state(self) -> DetailState:
        return self.channel.state

    @property
    def selected_id(self) -> str | None:
        return self.state.selected_id

    @property
    def window_title(self) -> str:
        detail = self.state.detail
        if detail is not None and detail.title:
            return f"Movie | {detail.title}"
        return self._app_title

    # ── Selection ────────────────────────────────────────────────────────

    def select(self, movie_id: str) -> None:
        """Open the detail view for movie_id, or close it if already selected."""
        if movie_id == self.state.selected_id:
            self.close()
            return

        epoch = self._epochs.advance()
        self._epochs.start(epoch, self._fetch(epoch, movie_id))
        self.channel.publish(
            selected_id=movie_id,
            detail=None,
            user_rating=None,
            error=None,
            is_loading=True,
        )

    def close(self) -> None:
        """Clear the selection and abandon any in-flight fetch."""
        if self.state.selected_id is None and not self._epochs.in_flight:
            return
        self._epochs.advance()
        self.channel.publish(
            selected_id=None,
            detail=None,
            user_rating=None,
            error=None,
            is_loading=False,
        )

    async def _fetch(self, epoch: int, movie_id: str) -> None:
        try:
            detail = await self._catalog.get_detail(movie_id)
        except CancelledOperation:
            if self._epochs.is_current(epoch):
                self.channel.publish(is_loading=False)
            return
        except CatalogError as e:
            if not self._epochs.is_current(epoch):
                logger.debug("Dropping stale detail error for %s", movie_id)
                return
            logger.warning("Detail fetch for %s failed: %s", movie_id, e)
            self.channel.publish(error=str(e), is_loading=False)
            return

        if not self._epochs.is_current(epoch):
            logger.debug("Dropping stale detail for %s", movie_id)
            return
        self.channel.publish(detail=detail, is_loading=False)

    async def wait_idle(self) -> None:
        await self._epochs.wait_idle()

    # ── Rating ───────────────────────────────────────────────────────────

    def set_user_rating(self, rating: int) -> None:
        if self.state.selected_id is None:
            raise ValueError("No movie selected")
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise ValueError(f"Rating must be a whole number, got {rating!r}")
        if not 1 <= rating <= self._max_rating:
            raise ValueError(f"Rating must be between 1 and {self._max_rating}")
        self.channel.publish(user_rating=rating)

    def is_already_watched(self, movie_id: str | None = None) -> bool:
        movie_id = movie_id or self.state.selected_id
        return movie_id is not None and self._watched.contains(movie_id)

    def watched_user_rating(self, movie_id: str | None = None) -> int | None:
        """The stored rating for an already watched movie, or None."""
        movie_id = movie_id or self.state.selected_id
        if movie_id is None:
            return None
        entry = self._watched.get(movie_id)
        return entry.user_rating if entry else None

    @property
    def can_commit(self) -> bool:
        state = self.state
        return (
            state.detail is not None
            and state.user_rating is not None
            and not self.is_already_watched(state.selected_id)
        )

    async def commit(self) -> WatchedEntry:
        """Add the selected movie with the user's rating to the watched list.

        Clears the selection on success. Raises DuplicateEntry if the movie is
        already watched and ValueError if there is nothing to commit yet.
        """
        state = self.state
        if state.detail is None or state.user_rating is None:
            raise ValueError("Select a movie and rate it before adding it")
        if self.is_already_watched(state.selected_id):
            raise DuplicateEntry(state.selected_id)

        entry = build_watched_entry(state.detail, state.user_rating)
        await self._watched.add(entry)
        if self.state.selected_id == state.selected_id:
            self.close()
        return entry
