"""State snapshot fan-out for the view layer.

Each subscriber gets its own asyncio.Queue. The current snapshot is queued
immediately on subscribe, then every change is queued in order.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

from pydantic import BaseModel

S = TypeVar("S", bound=BaseModel)


class StateChannel(Generic[S]):
    def __init__(self, initial: S):
        self._state = initial
        self._queues: list[asyncio.Queue] = []

    @property
    def state(self) -> S:
        return self._state

    def subscribe(self) -> asyncio.Queue:
        """Register a new subscriber queue, primed with the current state."""
        queue: asyncio.Queue = asyncio.Queue()
        queue.put_nowait(self._state)
        self._queues.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._queues:
            self._queues.remove(queue)

    async def stream(self) -> AsyncIterator[S]:
        """Yield snapshots until the consumer stops iterating."""
        queue = self.subscribe()
        try:
            while True:
                yield await queue.get()
        finally:
            self.unsubscribe(queue)

    def publish(self, **changes) -> S:
        """Apply changes and notify subscribers if anything actually changed."""
        new_state = self._state.model_copy(update=changes)
        if new_state == self._state:
            return self._state

        self._state = new_state
        for queue in self._queues:
            queue.put_nowait(new_state)
        return new_state

    @property
    def subscriber_count(self) -> int:
        return len(self._queues)
