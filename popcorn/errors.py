"""Error kinds raised across the catalog, controllers and storage layers."""


class PopcornError(Exception):
    """Base class for all Popcorn errors."""


class CatalogError(PopcornError):
    """A catalog request did not produce a usable payload."""


class TransportError(CatalogError):
    """Network failure, timeout, non-2xx status or an unreadable body."""


class DomainError(CatalogError):
    """The catalog answered but reported no result (e.g. "Movie not found!")."""


class CancelledOperation(PopcornError):
    """A request was superseded or aborted before it completed."""


class DuplicateEntry(PopcornError):
    """The movie is already in the watched collection."""

    def __init__(self, movie_id: str):
        super().__init__(f"Movie {movie_id} is already in the watched list")
        self.movie_id = movie_id


class MalformedPersistedState(PopcornError):
    """A stored payload could not be decoded into the expected type."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Stored value for {key!r} is malformed: {reason}")
        self.key = key
        self.reason = reason


class RuntimeParseError(PopcornError, ValueError):
    """A numeric field from the catalog could not be parsed."""
