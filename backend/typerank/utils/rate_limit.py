"""In-memory rate limiter for the auth endpoints."""

from __future__ import annotations

import threading
import time
from collections import defaultdict, deque

from ..errors import RateLimitError


class InMemoryRateLimiter:
    """Fixed-window limiter keyed by caller (e.g. client address + path).

    State lives in process memory, so each worker process counts on its own.
    """

    def __init__(self, clock=time.monotonic):
        self._hits = defaultdict(deque)
        self._lock = threading.Lock()
        self._clock = clock

    def allow(self, key: str, max_requests: int, window_seconds: int) -> tuple[bool, int]:
        """Record a hit for `key` and return `(allowed, retry_after_seconds)`."""
        now = self._clock()
        with self._lock:
            hits = self._hits[key]
            cutoff = now - window_seconds
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= max_requests:
                return False, max(1, int(window_seconds - (now - hits[0])))
            hits.append(now)
        return True, 0

    def check(self, key: str, max_requests: int, window_seconds: int) -> None:
        """Like `allow` but raises `RateLimitError` when the budget is spent."""
        allowed, retry_after = self.allow(key, max_requests, window_seconds)
        if not allowed:
            raise RateLimitError(f"rate limit exceeded; retry after {retry_after}s", retry_after=retry_after)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
