"""Implementation of a rate limiter.

Controls the frequency of outgoing IGDB requests. A single instance is shared
by every caller in the process, so the total outbound rate is bounded
regardless of resource kind or concurrency.
"""

import time
import asyncio
import logging
from collections import deque
from typing import Deque

logger = logging.getLogger(__name__)

# IGDB allows 4 requests per second
DEFAULT_MAX_REQUESTS = 4
DEFAULT_TIME_WINDOW_SECONDS = 1.0

class RateLimiter:
    """Sliding window rate limiter: at most `max_requests` per `time_window`."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        time_window: float = DEFAULT_TIME_WINDOW_SECONDS,
    ):
        """Initializes the rate limiter.

        Args:
            max_requests: Maximum number of requests allowed in the time window.
            time_window: The time window in seconds.

        Raises:
            ValueError: If either parameter is not positive.
        """
        if max_requests <= 0 or time_window <= 0:
            raise ValueError("Max requests and time window must be positive.")
        self.max_requests = max_requests
        self.time_window = time_window
        self.timestamps: Deque[float] = deque()
        self._lock = asyncio.Lock()
        logger.info(f"RateLimiter initialized: {max_requests} requests / {time_window} seconds")

    def _cleanup_timestamps(self, now: float) -> None:
        """Removes timestamps older than the time window."""
        while self.timestamps and now - self.timestamps[0] >= self.time_window:
            self.timestamps.popleft()

    def _wait_time(self, now: float) -> float:
        self._cleanup_timestamps(now)
        if len(self.timestamps) < self.max_requests:
            return 0.0
        oldest_timestamp = self.timestamps[0]
        return max(0.0, oldest_timestamp + self.time_window - now)

    async def acquire(self) -> None:
        """Waits until a request is permitted, then records it."""
        while True:
            async with self._lock:
                now = time.monotonic()
                wait_time = self._wait_time(now)
                if wait_time <= 0:
                    self.timestamps.append(now)
                    logger.debug("Rate limit permission granted.")
                    return

            logger.debug(f"Rate limit reached. Waiting for {wait_time:.2f} seconds.")
            await asyncio.sleep(wait_time)
            # Loop again: another task may have taken the freed slot

    async def get_wait_time(self) -> float:
        """Estimates the time needed before the next request can be made."""
        async with self._lock:
            return self._wait_time(time.monotonic())
