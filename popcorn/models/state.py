"""Immutable state snapshots published by the controllers."""

from pydantic import BaseModel

from popcorn.models.movie import MovieDetail, SearchResult, WatchedEntry


class SearchState(BaseModel):
    query: str = ""
    results: tuple[SearchResult, ...] = ()
    is_loading: bool = False
    error: str | None = None

    model_config = {"frozen": True}


class DetailState(BaseModel):
    selected_id: str | None = None
    detail: MovieDetail | None = None
    is_loading: bool = False
    user_rating: int | None = None
    error: str | None = None

    model_config = {"frozen": True}


class WatchedState(BaseModel):
    entries: tuple[WatchedEntry, ...] = ()

    model_config = {"frozen": True}
