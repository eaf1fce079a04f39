"""
Cache Package - In-memory answer caching.

- ResponseCache: TTL + capacity bounded store keyed by request fingerprint
"""
from omanx.cache.response_cache import CacheEntry, ResponseCache

__all__ = [
    "CacheEntry",
    "ResponseCache",
]
