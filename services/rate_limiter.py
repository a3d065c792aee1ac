"""
In-process rate limiter.

Bounds request bursts per key, where a key is
(actor-or-anonymous, origin, endpoint). Counters live in process memory:
a restart or a second worker starts from zero. That is acceptable here
because the limiter is abuse mitigation, not a correctness mechanism.

The window is sliding: a request is allowed when fewer than max_requests
requests for the same key were allowed during the last window_seconds.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: float = 0.0  # seconds until the oldest request leaves the window


def build_key(actor_id: Optional[object], origin: str, endpoint: str) -> str:
    """Compose the limiter key; unauthenticated callers share 'anonymous'."""
    return f"{actor_id or 'anonymous'}:{origin}:{endpoint}"


class RateLimiter:
    """
    Sliding-window limiter keyed by arbitrary strings.

    Example:
        limiter = RateLimiter(max_requests=10, window_seconds=60)
        decision = limiter.check(build_key(actor.actor_id, ip, "/api/v1/orders"))
        if not decision.allowed:
            # reject with 429
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._last_purge = clock()

    def check(self, key: str) -> RateLimitDecision:
        """Record a request for key and decide whether it is allowed."""
        now = self._clock()
        cutoff = now - self.window_seconds

        with self._lock:
            self._purge_expired(now)

            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()

            if len(hits) >= self.max_requests:
                retry_after = max(0.0, hits[0] + self.window_seconds - now)
                logger.warning("Rate limit hit", extra={"rate_limit_key": key})
                return RateLimitDecision(allowed=False, remaining=0, retry_after=retry_after)

            hits.append(now)
            return RateLimitDecision(allowed=True, remaining=self.max_requests - len(hits))

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def _purge_expired(self, now: float) -> None:
        # Drop idle keys at most once per window to keep memory bounded.
        if now - self._last_purge < self.window_seconds:
            return
        cutoff = now - self.window_seconds
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]
        self._last_purge = now


__all__ = ["RateLimiter", "RateLimitDecision", "build_key"]
