"""Pacing between successive upstream record probes."""

import asyncio
import time


class NoDelayPacer:
    async def wait(self) -> None:
        return None


class IntervalPacer:
    """Guarantees at least `interval` seconds between successive wait() returns."""

    def __init__(self, interval: float):
        self.interval = max(interval, 0.0)
        self._last: float | None = None

    async def wait(self) -> None:
        now = time.monotonic()
        if self._last is not None:
            remaining = self.interval - (now - self._last)
            if remaining > 0:
                await asyncio.sleep(remaining)
        self._last = time.monotonic()
