"""
Response Cache - Bounded, time-expiring store of generated answers.

Keys are SHA-256 fingerprints of (model, mode, lane, message). Entries
expire after a TTL (checked on access) and the oldest entry is evicted
once the store grows past its capacity. Reads move an entry to the newest
position, so eviction order approximates LRU.

Entries are not invalidated when the knowledge file reloads: an answer
built on the previous knowledge can be served until its TTL runs out.

Architecture note:
This is an in-memory implementation suitable for single-instance deployments.
For multi-instance deployments, consider Redis-backed storage.
"""
import hashlib
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from omanx.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached answer and the time it was stored."""
    text: str
    created_at: float


class ResponseCache:
    """
    Thread-safe TTL + capacity bounded answer cache.

    Every read-check-evict and write-insert-evict sequence runs under one
    lock, so the entry count never exceeds max_entries.

    Example:
        >>> cache = ResponseCache(ttl_seconds=600, max_entries=500)
        >>> key = ResponseCache.key_for("llama-3.3-70b-versatile", "Hi", "official", "scholar")
        >>> cache.set(key, "Hello!")
        >>> cache.get(key)
        'Hello!'
    """

    def __init__(
        self,
        ttl_seconds: float = 600,
        max_entries: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime
            max_entries: Capacity (must be at least 1)
            clock: Time source in seconds (injectable for tests)
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock

        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

        logger.info(
            f"ResponseCache initialized: TTL={ttl_seconds}s, max_entries={max_entries}"
        )

    @staticmethod
    def key_for(model: str, message: str, mode: Optional[str], lane: Optional[str]) -> str:
        """
        Fingerprint a request.

        The digest covers "model::mode::lane::message"; a missing mode or
        lane becomes an empty segment rather than being dropped.
        """
        raw = f"{model}::{mode or ''}::{lane or ''}::{message}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def get(self, key: str) -> Optional[str]:
        """
        Look up an answer.

        Returns:
            Cached text, or None if absent or expired (expired entries
            are removed by this call)
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if self._clock() - entry.created_at > self.ttl_seconds:
                del self._entries[key]
                return None

            self._entries.move_to_end(key)
            return entry.text

    def set(self, key: str, text: str) -> None:
        """Insert or overwrite an answer, evicting the oldest over capacity."""
        with self._lock:
            self._entries[key] = CacheEntry(text=text, created_at=self._clock())
            self._entries.move_to_end(key)

            if len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache evicted oldest entry: {evicted[:12]}...")

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Response cache cleared: {count} entries dropped")

    def stats(self) -> Dict[str, Any]:
        """Current size, capacity and TTL."""
        with self._lock:
            size = len(self._entries)
        return {
            "size": size,
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries
