"""Admission control for outbound provider calls.

Bounds simultaneous in-flight requests and paces grants so that two grants
are never closer together than ``1 / requests_per_second`` seconds.  Waiting
callers are admitted strictly in arrival order.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class RateLimiter:
    """FIFO concurrency + pacing limiter for a single event loop."""

    def __init__(self, requests_per_second: float = 10, max_concurrency: int = 5) -> None:
        if requests_per_second <= 0:
            msg = f"requests_per_second must be positive, got {requests_per_second}"
            raise ValueError(msg)
        if max_concurrency < 1:
            msg = f"max_concurrency must be at least 1, got {max_concurrency}"
            raise ValueError(msg)
        self._requests_per_second = requests_per_second
        self._max_concurrency = max_concurrency
        self._min_interval = 1.0 / requests_per_second
        # Only the caller holding the gate competes for a slot; asyncio.Lock wakes waiters FIFO.
        self._gate = asyncio.Lock()
        self._slot_freed: asyncio.Future[None] | None = None
        self._active = 0
        self._waiting = 0
        self._last_grant: float | None = None

    @property
    def min_interval(self) -> float:
        """Minimum seconds between two grants."""
        return self._min_interval

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    @property
    def active_count(self) -> int:
        """Slots currently granted and not yet released."""
        return self._active

    @property
    def queue_size(self) -> int:
        """Callers suspended in acquire()."""
        return self._waiting

    async def acquire(self) -> None:
        """Suspend until a slot is free and the pacing interval has elapsed, then take one slot."""
        loop = asyncio.get_running_loop()
        self._waiting += 1
        try:
            async with self._gate:
                while self._active >= self._max_concurrency:
                    self._slot_freed = loop.create_future()
                    try:
                        await self._slot_freed
                    finally:
                        self._slot_freed = None

                if self._last_grant is not None:
                    delay = self._last_grant + self._min_interval - loop.time()
                    if delay > 0:
                        await asyncio.sleep(delay)

                self._active += 1
                self._last_grant = loop.time()
        finally:
            self._waiting -= 1

    def release(self) -> None:
        """Return a slot and wake the caller at the head of the queue."""
        if self._active <= 0:
            msg = "release() called without a matching acquire()"
            raise RuntimeError(msg)
        self._active -= 1
        waiter = self._slot_freed
        if waiter is not None and not waiter.done():
            waiter.set_result(None)

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one slot for the duration of the block."""
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    def status(self) -> dict[str, int]:
        """Snapshot of queue and in-flight counts."""
        return {"queue_size": self.queue_size, "active_count": self.active_count}
