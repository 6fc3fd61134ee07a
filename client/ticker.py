from __future__ import annotations
import asyncio
from datetime import datetime
from typing import Optional


class Ticker:
    """
    Fixed-period tick source for an asyncio loop.

    Ticks are anchored to the start time, so a consumer that is late does not
    shift later ticks. Ticks missed while the consumer was busy are dropped:
    ``tick()`` returns at most one pending tick, never a burst.
    """

    def __init__(self, interval: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        if interval <= 0:
            raise ValueError("non-positive interval for Ticker")
        self.interval = interval
        self._loop = loop or asyncio.get_running_loop()
        self._next = self._loop.time() + interval
        self.stopped = False
        self.dropped = 0

    async def tick(self) -> datetime:
        """Wait for the next tick and return its wall-clock time."""
        if self.stopped:
            raise RuntimeError("Ticker is stopped")

        delay = self._next - self._loop.time()
        if delay > 0:
            await asyncio.sleep(delay)

        now = self._loop.time()
        # skip every period that already elapsed
        missed = max(0, int((now - self._next) // self.interval))
        self.dropped += missed
        self._next += (missed + 1) * self.interval
        return datetime.now()

    def stop(self) -> None:
        self.stopped = True
