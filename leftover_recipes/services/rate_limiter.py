"""Process-wide rate limiter for recipe generation requests.

Keeps the timestamps of admitted requests inside a trailing window. There is no
per-client partitioning: one instance guards the whole process, which suits a
single-instance deployment.
"""

import threading
import time
from collections import deque
from typing import Callable, Optional

from leftover_recipes.utils.logger import logger


class RateLimiter:
    """Trailing-window admission control.

    Timestamps are appended in increasing order, so eviction is always a prefix trim.
    The evict-check-record sequence runs under a lock so concurrent callers cannot
    both observe room for a single remaining slot.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 60.0,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        """Initialize the limiter.

        Args:
            max_requests: Requests admitted per window (default: 5).
            window_seconds: Length of the trailing window in seconds (default: 60).
            clock: Monotonic time source in seconds; defaults to time.monotonic.

        Raises:
            ValueError: If max_requests or window_seconds is not positive.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._timestamps: deque[float] = deque()
        self._lock = threading.Lock()

    def admit(self) -> bool:
        """Admit or reject one request.

        Returns:
            True if the request was admitted (and recorded), False if the window is full.
            A rejected request is not recorded.
        """
        with self._lock:
            now = self._clock()
            cutoff = now - self.window_seconds
            while self._timestamps and self._timestamps[0] < cutoff:
                self._timestamps.popleft()

            if len(self._timestamps) >= self.max_requests:
                logger.warning(
                    f"Rate limit reached: {len(self._timestamps)}/{self.max_requests} "
                    f"requests in the last {self.window_seconds:g}s"
                )
                return False

            self._timestamps.append(now)
            return True

    def reset(self) -> None:
        """Forget all recorded requests."""
        with self._lock:
            self._timestamps.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._timestamps)
