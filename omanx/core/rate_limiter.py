"""
Rate Limiter - Per-client request budget for /chat.

Every /chat call costs a provider completion, so each client IP gets a
fixed number of requests per sliding window (120 per 15 minutes by
default). Diagnostics and admin endpoints are not limited.

State is in-memory and per process; a multi-instance deployment needs a
shared store instead.
"""
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple

from omanx.core.logging_config import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Sliding window rate limiter keyed by client identifier.

    Each client keeps a queue of its request times inside the current
    window; the oldest times fall off the front as the window moves.

    Example:
        >>> limiter = RateLimiter(max_requests=120, window_seconds=900)
        >>> limiter.is_allowed("203.0.113.7")
        (True, 119)
    """

    def __init__(
        self,
        max_requests: int = 120,
        window_seconds: int = 900,
        cleanup_interval_seconds: int = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            max_requests: Requests allowed per client per window
            window_seconds: Window length
            cleanup_interval_seconds: How often idle clients are forgotten
            clock: Monotonic time source (injectable for tests)
        """
        self.limit = max_requests
        self.window = window_seconds
        self.cleanup_interval = cleanup_interval_seconds
        self._clock = clock

        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._next_cleanup = clock() + cleanup_interval_seconds

        logger.info(f"RateLimiter initialized: {max_requests} requests/{window_seconds}s")

    def is_allowed(self, identifier: str) -> Tuple[bool, int]:
        """
        Record a request if the client still has budget.

        Args:
            identifier: Client IP address

        Returns:
            Tuple of (is_allowed, remaining_requests)
        """
        now = self._clock()

        with self._lock:
            if now >= self._next_cleanup:
                self._forget_idle(now)

            hits = self._hits.setdefault(identifier, deque())
            self._expire(hits, now)

            if len(hits) >= self.limit:
                logger.warning(f"Rate limit exceeded: client={identifier}, window={self.window}s")
                return False, 0

            hits.append(now)
            return True, self.limit - len(hits)

    def retry_after(self, identifier: str) -> int:
        """Whole seconds (at least 1) until the client's oldest request leaves the window."""
        with self._lock:
            hits = self._hits.get(identifier)
            if not hits:
                return 1
            return max(1, int(hits[0] + self.window - self._clock()))

    def _expire(self, hits: Deque[float], now: float) -> None:
        cutoff = now - self.window
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def _forget_idle(self, now: float) -> None:
        for identifier in list(self._hits):
            hits = self._hits[identifier]
            self._expire(hits, now)
            if not hits:
                del self._hits[identifier]

        self._next_cleanup = now + self.cleanup_interval
        logger.debug(f"Rate limiter cleanup: {len(self._hits)} active clients")
