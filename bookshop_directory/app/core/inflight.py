"""
Sharing one in-flight coroutine between concurrent callers.

Full backend scans are the only slow operations in the service.  When
several requests race to start the same scan on one event loop, they
should all wait for a single run instead of each issuing their own.
``SingleFlight`` keeps the running task; late callers await the same
task through ``asyncio.shield`` so a caller that gives up does not
cancel the work for everyone else.  Once the task finishes (successfully
or not) the next call starts a fresh run.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")


class SingleFlight:
    def __init__(self) -> None:
        self._task: Optional[asyncio.Future] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self, factory: Callable[[], Awaitable[T]]) -> T:
        """Await the in-flight call, starting ``factory()`` if none is running."""
        if self._task is None or self._task.done():
            self._task = asyncio.ensure_future(factory())
        task = self._task
        try:
            return await asyncio.shield(task)
        finally:
            if task.done() and self._task is task:
                self._task = None
