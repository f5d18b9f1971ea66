"""Latest-request-wins bookkeeping shared by the controllers.

Every new request advances the epoch and cancels the task it supersedes.
A completion may only touch state if its epoch is still the current one.
"""

import asyncio
import logging
from collections.abc import Coroutine

logger = logging.getLogger(__name__)


class RequestEpochs:
    def __init__(self, name: str):
        self.name = name
        self.current = 0
        self._task: asyncio.Task | None = None

    def advance(self) -> int:
        """Start a new epoch, cancelling the in-flight task of the previous one."""
        self.current += 1
        self._cancel_task()
        return self.current

    def is_current(self, epoch: int) -> bool:
        return epoch == self.current

    def start(self, epoch: int, coro: Coroutine) -> asyncio.Task:
        """Run coro as the task bound to epoch. Must be called inside a running loop."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        task = loop.create_task(coro, name=f"{self.name}-{epoch}")
        task.add_done_callback(self._on_done)
        self._task = task
        return task

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def wait_idle(self) -> None:
        """Wait until no task is in flight, including tasks started meanwhile."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            logger.debug("Cancelling %s", self._task.get_name())
            self._task.cancel()

    @staticmethod
    def _on_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled error in %s", task.get_name(), exc_info=exc)
