"""Bounded-concurrency rate limiter with a FIFO wait queue."""

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RateLimiter:
    """
    Bounds both simultaneous in-flight calls and the dispatch rate.

    - A call made below max_concurrent, with nobody queued, runs immediately.
    - Otherwise it waits in FIFO order until a slot is free AND min_interval
      seconds have passed since the limiter's last dispatch.

    Event-loop confined: all bookkeeping happens between awaits.
    """

    def __init__(self, max_concurrent: int = 3, min_interval: float = 1.0) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.max_concurrent = max_concurrent
        self.min_interval = min_interval

        self._active = 0
        self._waiters: deque[asyncio.Future] = deque()
        self._last_dispatch: Optional[float] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def active(self) -> int:
        return self._active

    @property
    def queued(self) -> int:
        return sum(1 for w in self._waiters if not w.done())

    async def execute(self, fn: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        await self._acquire()
        try:
            return await fn(*args, **kwargs)
        finally:
            self._release()

    # ── Slot bookkeeping ───────────────────────────────────────

    async def _acquire(self) -> None:
        loop = asyncio.get_running_loop()
        if self._active < self.max_concurrent and not self._waiters:
            self._dispatch(loop)
            return

        waiter = loop.create_future()
        self._waiters.append(waiter)
        logger.debug("Rate limiter queueing call active=%d queued=%d", self._active, len(self._waiters))
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Slot was handed over just before cancellation
                self._release()
            else:
                try:
                    self._waiters.remove(waiter)
                except ValueError:
                    pass
            raise

    def _dispatch(self, loop: asyncio.AbstractEventLoop) -> None:
        self._active += 1
        self._last_dispatch = loop.time()

    def _release(self) -> None:
        self._active -= 1
        self._cancel_timer()
        self._wake_next()

    def _on_timer(self) -> None:
        self._timer = None
        self._wake_next()

    def _wake_next(self) -> None:
        loop = asyncio.get_running_loop()

        while self._waiters and self._active < self.max_concurrent:
            head = self._waiters[0]
            if head.done():
                self._waiters.popleft()
                continue

            if self._last_dispatch is not None:
                remaining = self._last_dispatch + self.min_interval - loop.time()
                if remaining > 0:
                    if self._timer is None:
                        self._timer = loop.call_later(remaining, self._on_timer)
                    return

            self._waiters.popleft()
            self._dispatch(loop)
            head.set_result(None)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
