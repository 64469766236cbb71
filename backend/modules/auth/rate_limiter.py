"""
In-memory sliding-window rate limiter.

Keeps a list of attempt timestamps per key and prunes it lazily on every
check, so there is no background sweep. State is process-local: running
several API workers gives each worker its own budget. Deployments with
more than one process pass an ``IRateLimiter`` backed by a shared store with
keyed expiry to ``create_app`` instead.
"""

import threading
import time
from collections import defaultdict
from typing import Callable, Optional


def _now_ms() -> float:
    return time.time() * 1000


class SlidingWindowRateLimiter:
    """
    Per-key sliding-window limiter.

    Example:
        limiter = SlidingWindowRateLimiter()
        if not limiter.is_allowed("login:jane@example.com", 5, 15 * 60 * 1000):
            ...
    """

    def __init__(self, clock: Callable[[], float] = _now_ms) -> None:
        """
        Args:
            clock: Returns the current time in milliseconds. Injectable for tests.
        """
        self._clock = clock
        self._attempts: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()

    def _prune(self, key: str, window_ms: float, now: float) -> list[float]:
        recent = [t for t in self._attempts.get(key, ()) if now - t < window_ms]
        if recent:
            self._attempts[key] = recent
        else:
            self._attempts.pop(key, None)
        return recent

    def is_allowed(self, key: str, max_attempts: int, window_ms: float) -> bool:
        """
        Record an attempt for ``key`` if the window has room.

        Returns:
            True when fewer than ``max_attempts`` attempts fall inside the
            trailing window; the attempt is then recorded. False otherwise,
            and nothing is recorded.
        """
        with self._lock:
            now = self._clock()
            recent = self._prune(key, window_ms, now)
            if len(recent) >= max_attempts:
                return False
            self._attempts[key].append(now)
            return True

    def retry_after(self, key: str, max_attempts: int, window_ms: float) -> int:
        """Whole seconds until ``key`` gets a free slot, 0 if it has one now."""
        with self._lock:
            now = self._clock()
            recent = self._prune(key, window_ms, now)
            if len(recent) < max_attempts:
                return 0
            oldest = min(recent)
            return int((oldest + window_ms - now) / 1000) + 1

    def reset(self, key: str) -> None:
        """Forget every recorded attempt for ``key``."""
        with self._lock:
            self._attempts.pop(key, None)


_rate_limiter: Optional[SlidingWindowRateLimiter] = None


def get_rate_limiter() -> SlidingWindowRateLimiter:
    """Get or create the process-wide limiter singleton."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = SlidingWindowRateLimiter()
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Drop the singleton. Useful for testing."""
    global _rate_limiter
    _rate_limiter = None
