"""In-memory sliding-window rate limiter keyed per caller and route."""

from __future__ import annotations

import math
import time
from collections import deque
from typing import Callable

from memoir_audio.errors import RateLimitError


def rate_limit_key(route: str, *, user_id: str | None = None, client_ip: str | None = None) -> str:
    """Return ``api:<route>:<user>`` or ``api:<route>:ip:<ip>``."""

    if user_id:
        return f"api:{route}:{user_id}"
    return f"api:{route}:ip:{client_ip or 'unknown'}"


class SlidingWindowRateLimiter:
    """Allow ``max_requests`` hits per ``window_seconds`` for each key."""

    def __init__(
        self,
        max_requests: int = 30,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def _prune(self, key: str, now: float) -> deque[float]:
        hits = self._hits.get(key)
        if hits is None:
            return deque()
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if not hits:
            del self._hits[key]
        return hits

    def _evict_expired(self, now: float) -> None:
        cutoff = now - self.window_seconds
        expired = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in expired:
            del self._hits[key]

    @property
    def tracked_keys(self) -> int:
        return len(self._hits)

    def remaining(self, key: str) -> int:
        hits = self._prune(key, self._clock())
        return max(self.max_requests - len(hits), 0)

    def hit(self, key: str) -> int:
        """Record one request for ``key`` and return how many are left.

        Raises:
            RateLimitError: When the window is already full.
        """

        now = self._clock()
        if now - self._last_sweep >= self.window_seconds:
            self._evict_expired(now)
            self._last_sweep = now
        hits = self._prune(key, now)
        if len(hits) >= self.max_requests:
            retry_after = max(math.ceil(hits[0] + self.window_seconds - now), 1)
            raise RateLimitError(
                "Too many requests. Please try again later.",
                retry_after=retry_after,
                limit=self.max_requests,
            )
        self._hits.setdefault(key, hits).append(now)
        return self.max_requests - len(hits)

    def reset(self) -> None:
        self._hits.clear()


__all__ = ["SlidingWindowRateLimiter", "rate_limit_key"]
