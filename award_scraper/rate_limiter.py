"""
Admission control for browser renders.

Every render shares one browser process, so single-page requests and batch
ingestion both pass through the same limiter: at most ``max_concurrent``
jobs in flight and at most ``max_per_window`` job starts per rolling window.
"""

import asyncio
import time
from collections import deque
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Deque, Dict

import structlog

from award_scraper.config import (
    RENDER_MAX_CONCURRENT,
    RENDER_MAX_PER_WINDOW,
    RENDER_WINDOW_SECONDS
)

logger = structlog.get_logger()


class RenderRateLimiter:
    """Bounded admission queue with a sliding-window throughput cap."""

    def __init__(
        self,
        max_concurrent: int = RENDER_MAX_CONCURRENT,
        max_per_window: int = RENDER_MAX_PER_WINDOW,
        window_seconds: float = RENDER_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize rate limiter.

        Args:
            max_concurrent: Jobs allowed in flight at once
            max_per_window: Job starts allowed per window
            window_seconds: Length of the rolling window
            clock: Monotonic clock (injectable for tests)
            sleep: Coroutine used to wait (injectable for tests)
        """
        self.max_concurrent = max(1, max_concurrent)
        self.max_per_window = max(1, max_per_window)
        self.window_seconds = window_seconds
        self._clock = clock
        self._sleep = sleep
        self._slots = asyncio.Semaphore(self.max_concurrent)
        self._starts: Deque[float] = deque()
        self._in_flight = 0

    def _prune(self, now: float) -> None:
        while self._starts and now - self._starts[0] >= self.window_seconds:
            self._starts.popleft()

    async def _wait_for_window(self) -> None:
        while True:
            now = self._clock()
            self._prune(now)
            if len(self._starts) < self.max_per_window:
                self._starts.append(now)
                return

            wait_time = self.window_seconds - (now - self._starts[0])
            logger.debug("render_rate_limited", wait_seconds=round(wait_time, 2))
            await self._sleep(wait_time)

    @asynccontextmanager
    async def admit(self) -> AsyncIterator[None]:
        """Hold an admission slot for the duration of one render job."""
        async with self._slots:
            await self._wait_for_window()
            self._in_flight += 1
            try:
                yield
            finally:
                self._in_flight -= 1

    def get_status(self) -> Dict:
        """
        Get current admission status.

        Returns:
            Dict with in-flight count and window usage
        """
        self._prune(self._clock())
        return {
            "in_flight": self._in_flight,
            "max_concurrent": self.max_concurrent,
            "window": {
                "current": len(self._starts),
                "limit": self.max_per_window,
                "seconds": self.window_seconds,
            },
            "is_allowed": (
                self._in_flight < self.max_concurrent
                and len(self._starts) < self.max_per_window
            ),
        }
