"""Bound on simultaneously running coroutines."""
import asyncio
import math
from collections import deque
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")

DEFAULT_CONCURRENCY = 5


def safe_concurrency(value: Any, default: int = DEFAULT_CONCURRENCY) -> int:
    """Parse a concurrency setting; anything not a finite positive number gives ``default``."""
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(parsed) or parsed < 1:
        return default
    return int(parsed)


class ConcurrencyLimiter:
    """Runs at most ``max_concurrent`` tasks at once; the rest wait in FIFO order.

    Each task's outcome is its own: an exception is returned to that task's
    caller and its slot is handed to the next waiter.
    """

    def __init__(self, max_concurrent: Any = DEFAULT_CONCURRENCY):
        self.max_concurrent = safe_concurrency(max_concurrent)
        self._active = 0
        self._waiters: deque[asyncio.Future] = deque()

    @property
    def active(self) -> int:
        return self._active

    @property
    def waiting(self) -> int:
        return sum(1 for w in self._waiters if not w.done())

    async def _acquire(self):
        if self._active < self.max_concurrent and not self._waiters:
            self._active += 1
            return
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # The slot was handed over just before cancellation; pass it on.
                self._release()
            else:
                try:
                    self._waiters.remove(waiter)
                except ValueError:
                    pass
            raise

    def _release(self):
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                # Hand the slot straight to the next waiter; active count is unchanged.
                waiter.set_result(None)
                return
        self._active -= 1

    async def run(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run ``task`` once a slot is free and return its result."""
        await self._acquire()
        try:
            return await task()
        finally:
            self._release()

    def submit(self, task: Callable[[], Awaitable[T]]) -> "asyncio.Task[T]":
        """Schedule ``task`` and return its future."""
        return asyncio.ensure_future(self.run(task))
