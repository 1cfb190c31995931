"""
Rate Limiter: fixed-window request counting per caller.

WHAT THIS DOES:
Caps how many analyses one caller (client IP) can start per window.
Every analysis fans out into several searches and link probes, so an
unthrottled caller can burn through the search quota quickly.

HOW IT WORKS:
- The first request from a key opens a window of `window_ms`
- Each request increments the key's counter
- Once the window has elapsed, the counter resets; elapsed windows of
  other keys are dropped at the same time
- Request number max_requests + 1 inside a window is refused, with the
  time left until the window resets

The limiter is an explicit object injected into the route (see
api/routes.py), not module state, so tests can build their own.

USAGE:
    limiter = FixedWindowRateLimiter(window_ms=120_000, max_requests=20)
    decision = limiter.hit("203.0.113.7")
    if not decision.allowed:
        # respond 429, retry after decision.retry_after_ms
"""

import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of counting one request."""
    allowed: bool
    retry_after_ms: int = 0


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """
    In-process fixed-window counter keyed by caller identity.

    Only single-process deployments share counts; each worker keeps
    its own buckets.
    """

    def __init__(
        self,
        window_ms: int,
        max_requests: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            window_ms: Window length in milliseconds
            max_requests: Requests allowed per key per window
            clock: Seconds-returning clock (injectable for tests)
        """
        self.window_ms = window_ms
        self.max_requests = max_requests
        self._clock = clock
        self._buckets: dict[str, _Window] = {}

    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for `key` and decide whether it may proceed."""
        now_ms = self._clock() * 1000

        window = self._buckets.get(key)
        if window is None or now_ms > window.reset_at:
            self._evict_expired(now_ms)
            window = _Window(count=0, reset_at=now_ms + self.window_ms)
            self._buckets[key] = window

        window.count += 1

        if window.count > self.max_requests:
            retry_after_ms = max(0, int(window.reset_at - now_ms))
            return RateLimitDecision(allowed=False, retry_after_ms=retry_after_ms)

        return RateLimitDecision(allowed=True)

    def _evict_expired(self, now_ms: float) -> None:
        """Drop windows that have elapsed, so idle callers don't accumulate."""
        expired = [key for key, window in self._buckets.items() if now_ms > window.reset_at]
        for key in expired:
            del self._buckets[key]

    def reset(self) -> None:
        """Forget all counters."""
        self._buckets.clear()
