"""Pydantic models for catalog movies and the watched list."""

import math
import re

from pydantic import BaseModel, Field

from popcorn.errors import RuntimeParseError

_LEADING_INT = re.compile(r"^\s*(\d+)")


def parse_runtime_minutes(text: str) -> int:
    """Parse the leading integer of a runtime string such as "148 min"."""
    match = _LEADING_INT.match(text or "")
    if not match:
        raise RuntimeParseError(f"Unparseable runtime: {text!r}")
    return int(match.group(1))


def parse_rating(text: str) -> float:
    """Parse a catalog rating such as "7.5"; "N/A" and blanks are errors."""
    try:
        value = float(text)
    except (TypeError, ValueError):
        raise RuntimeParseError(f"Unparseable rating: {text!r}") from None
    if not math.isfinite(value):
        raise RuntimeParseError(f"Unparseable rating: {text!r}")
    return value


class SearchResult(BaseModel):
    """One row of a catalog search, in the order the catalog returned it."""

    id: str = Field(alias="imdbID")
    title: str = Field(alias="Title")
    year: str = Field("", alias="Year")
    poster_url: str = Field("", alias="Poster")

    model_config = {"populate_by_name": True}


class MovieDetail(BaseModel):
    """Full catalog record for a single movie.

    Runtime and rating are kept as the catalog sends them ("148 min", "7.5",
    "N/A"); they only become numbers when promoted into a WatchedEntry.
    """

    id: str = Field(alias="imdbID")
    title: str = Field("", alias="Title")
    year: str = Field("", alias="Year")
    poster_url: str = Field("", alias="Poster")
    runtime: str = Field("", alias="Runtime")
    imdb_rating: str = Field("", alias="imdbRating")
    plot: str = Field("", alias="Plot")
    released: str = Field("", alias="Released")
    actors: str = Field("", alias="Actors")
    director: str = Field("", alias="Director")
    genre: str = Field("", alias="Genre")

    model_config = {"populate_by_name": True}


class WatchedEntry(BaseModel):
    id: str = Field(..., min_length=1)
    title: str
    year: str = ""
    poster_url: str = ""
    runtime_minutes: int = 0
    external_rating: float = 0.0
    user_rating: int = Field(..., ge=1)


class WatchedSummary(BaseModel):
    count: int = 0
    avg_external_rating: float = 0.0
    avg_user_rating: float = 0.0
    avg_runtime: float = 0.0
