from __future__ import annotations

import math
import time
from collections import deque
from threading import Lock
from typing import Callable, Deque

from candlescope.candles.errors import MarketDataError


class SlidingWindowRateLimiter:
    """Client-side request budget: at most `max_requests` per `window_seconds`.

    `clock` returns seconds; tests inject a fake one.
    """

    def __init__(self, max_requests: int = 5, window_seconds: float = 60.0, clock: Callable[[], float] = time.time) -> None:
        self.max_requests = max(1, int(max_requests))
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._hits: Deque[float] = deque()
        self._lock = Lock()

    def acquire(self) -> None:
        with self._lock:
            now = float(self._clock())

            # Evict old timestamps.
            while self._hits and (now - self._hits[0]) > self.window_seconds:
                self._hits.popleft()

            if len(self._hits) >= self.max_requests:
                wait_s = math.ceil(self.window_seconds - (now - self._hits[0]))
                raise MarketDataError(f"Rate limit reached. Try again in {wait_s}s.", "RATE_LIMITED")

            self._hits.append(now)

    def remaining(self) -> int:
        with self._lock:
            now = float(self._clock())
            live = [t for t in self._hits if (now - t) <= self.window_seconds]
            return max(0, self.max_requests - len(live))

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
