# mirrorget/crawler/throttle.py
"""
Chunk-granular download rate limiting.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable


class RateLimiter:
    """Caps stream throughput at ``rate`` bytes per second (0 disables).

    After each chunk the caller reports cumulative bytes and elapsed time.
    When the observed throughput is above the budget the stream is suspended
    for ``chunk / rate`` seconds, truncated to whole milliseconds. Overshoot
    is bounded by roughly one chunk per adjustment.
    """

    def __init__(
        self,
        rate: int,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if rate < 0:
            raise ValueError("rate must be >= 0")
        self.rate = rate
        self._sleep = sleep

    @property
    def enabled(self) -> bool:
        return self.rate > 0

    def delay_for(self, chunk: int, written: int, elapsed: float) -> float:
        """Seconds to wait before the next read; 0.0 when within budget."""
        if not self.enabled or written == 0 or chunk == 0:
            return 0.0
        if elapsed > 0 and written / elapsed <= self.rate:
            return 0.0
        millis = int(chunk * 1000 / self.rate)
        return millis / 1000

    async def throttle(self, chunk: int, written: int, elapsed: float) -> float:
        delay = self.delay_for(chunk, written, elapsed)
        if delay > 0:
            await self._sleep(delay)
        return delay
