# ============================================================================
# src/medication_reconciliation/llm/cache.py
# ============================================================================
"""
Response cache for the primary extraction oracle.

Features:
- TTL (time-to-live) expiration
- LRU eviction when the entry limit is reached
- Thread-safe operations
- Cache statistics

The cache is an explicit object handed to whoever needs it. Nothing in the
package keeps a module-level instance, so every test can start from a fresh
cache.
"""

import hashlib
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Any, Optional
import logging

from ..utils.exceptions import CacheError


logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """
    Single cache entry with metadata.

    Attributes:
        key: Cache key (hash)
        value: Cached value
        created_at: Monotonic creation time
        access_count: Number of times read
        ttl_seconds: Time-to-live (None = no expiration)
    """
    key: str
    value: Any
    created_at: float
    access_count: int = 0
    ttl_seconds: Optional[float] = None

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.ttl_seconds is None:
            return False
        now = time.monotonic() if now is None else now
        return (now - self.created_at) > self.ttl_seconds


class CacheStatistics:
    """Track cache performance metrics"""

    def __init__(self):
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0
        self.writes = 0

    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "writes": self.writes,
            "hit_rate": self.hit_rate(),
        }


class ResponseCache:
    """
    In-memory TTL + LRU cache keyed by an MD5 hash of the input.

    Example:
        cache = ResponseCache(max_size=256, default_ttl=300)
        cache.set(note_text, result)
        cached = cache.get(note_text)
        cache.clear()
    """

    def __init__(
        self,
        max_size: int = 256,
        default_ttl: Optional[float] = 300,
        clock=time.monotonic,
    ):
        """
        Args:
            max_size: Maximum number of entries (LRU eviction when exceeded)
            default_ttl: Default TTL in seconds (None = no expiration)
            clock: Zero-argument callable returning seconds; injectable for tests
        """
        if max_size <= 0:
            raise CacheError(f"Cache max_size must be positive, got {max_size}")

        self.max_size = max_size
        self.default_ttl = default_ttl
        self._clock = clock

        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStatistics()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    @staticmethod
    def make_key(*parts: str) -> str:
        """Build a stable MD5 key from one or more text parts."""
        joined = "\x1f".join(parts)
        return hashlib.md5(joined.encode("utf-8")).hexdigest()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            cache_key = self.make_key(key)

            entry = self._cache.get(cache_key)
            if entry is None:
                self._stats.misses += 1
                return default

            if entry.is_expired(self._clock()):
                logger.debug(f"Cache entry expired: {cache_key}")
                del self._cache[cache_key]
                self._stats.misses += 1
                self._stats.expirations += 1
                return default

            entry.access_count += 1
            self._cache.move_to_end(cache_key)
            self._stats.hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """
        Store value in cache.

        Args:
            key: Cache key (hashed before storage)
            value: Value to cache
            ttl: TTL in seconds (overrides default_ttl)
        """
        with self._lock:
            cache_key = self.make_key(key)

            if cache_key not in self._cache:
                while len(self._cache) >= self.max_size:
                    oldest_key = next(iter(self._cache))
                    del self._cache[oldest_key]
                    self._stats.evictions += 1
                    logger.debug(f"Evicted entry: {oldest_key}")

            self._cache[cache_key] = CacheEntry(
                key=cache_key,
                value=value,
                created_at=self._clock(),
                ttl_seconds=ttl if ttl is not None else self.default_ttl,
            )
            self._cache.move_to_end(cache_key)
            self._stats.writes += 1

    def delete(self, key: str) -> bool:
        """Delete entry; returns False if it was not cached."""
        with self._lock:
            cache_key = self.make_key(key)
            if cache_key in self._cache:
                del self._cache[cache_key]
                return True
            return False

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            logger.info("Response cache cleared")

    def cleanup_expired(self) -> int:
        """
        Remove all expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired_keys = [
                key for key, entry in self._cache.items()
                if entry.is_expired(now)
            ]

            for key in expired_keys:
                del self._cache[key]
                self._stats.expirations += 1

            if expired_keys:
                logger.info(f"Cleaned up {len(expired_keys)} expired entries")

            return len(expired_keys)

    def get_statistics(self) -> Dict[str, Any]:
        with self._lock:
            stats = self._stats.to_dict()
            stats["entry_count"] = len(self._cache)
            stats["max_size"] = self.max_size
            stats["default_ttl"] = self.default_ttl
            return stats
