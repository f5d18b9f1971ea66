"""Async helpers and canned catalog payloads shared by the tests."""

import asyncio


async def until(predicate, max_ticks: int = 200) -> None:
    """Yield to the event loop until predicate() is true."""
    for _ in range(max_ticks):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


def drain(queue: asyncio.Queue) -> list:
    items = []
    while not queue.empty():
        items.append(queue.get_nowait())
    return items


# ── Canned catalog payloads ─────────────────────────────────────────────────

BATMAN_SEARCH = {
    "Response": "True",
    "totalResults": "1",
    "Search": [
        {"imdbID": "tt1", "Title": "Batman", "Year": "1989", "Poster": "https://img.test/tt1.jpg", "Type": "movie"},
    ],
}

BATMAN_DETAIL = {
    "Response": "True",
    "imdbID": "tt1",
    "Title": "Batman",
    "Year": "1989",
    "Poster": "https://img.test/tt1.jpg",
    "Runtime": "126 min",
    "imdbRating": "7.5",
    "Plot": "The Dark Knight of Gotham City begins his war on crime.",
    "Released": "23 Jun 1989",
    "Actors": "Michael Keaton, Jack Nicholson",
    "Director": "Tim Burton",
    "Genre": "Action, Adventure",
}

NOT_FOUND = {"Response": "False", "Error": "Movie not found!"}
