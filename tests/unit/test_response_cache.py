# ============================================================================
# tests/unit/test_response_cache.py
# ============================================================================
"""
Tests for the extraction response cache
"""

import pytest

from medication_reconciliation.llm.cache import CacheEntry, CacheStatistics, ResponseCache
from medication_reconciliation.utils.exceptions import CacheError


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResponseCache(max_size=3, default_ttl=60, clock=clock)


class TestCacheEntry:

    def test_no_ttl_never_expires(self):
        entry = CacheEntry(key="k", value="v", created_at=0.0, ttl_seconds=None)
        assert not entry.is_expired(now=10 ** 9)

    def test_expires_after_ttl(self):
        entry = CacheEntry(key="k", value="v", created_at=100.0, ttl_seconds=60)
        assert not entry.is_expired(now=160.0)
        assert entry.is_expired(now=160.5)


class TestCacheStatistics:

    def test_hit_rate(self):
        stats = CacheStatistics()
        assert stats.hit_rate() == 0.0

        stats.hits = 3
        stats.misses = 1
        assert stats.hit_rate() == 0.75


class TestResponseCache:

    def test_set_and_get(self, cache):
        cache.set("note text", {"medications": []})

        assert cache.get("note text") == {"medications": []}
        assert len(cache) == 1

    def test_miss_returns_default(self, cache):
        assert cache.get("unknown") is None
        assert cache.get("unknown", default="fallback") == "fallback"

    def test_ttl_expiration(self, cache, clock):
        cache.set("note", "result")
        clock.advance(61)

        assert cache.get("note") is None
        assert len(cache) == 0
        assert cache.get_statistics()["expirations"] == 1

    def test_per_entry_ttl_overrides_default(self, cache, clock):
        cache.set("short", "a", ttl=5)
        cache.set("long", "b")
        clock.advance(10)

        assert cache.get("short") is None
        assert cache.get("long") == "b"

    def test_lru_eviction(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)

        # Touch "a" so "b" is the least recently used
        cache.get("a")
        cache.set("d", 4)

        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("d") == 4
        assert cache.get_statistics()["evictions"] == 1

    def test_overwrite_does_not_evict(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        cache.set("a", 10)

        assert len(cache) == 3
        assert cache.get("a") == 10
        assert cache.get_statistics()["evictions"] == 0

    def test_delete(self, cache):
        cache.set("a", 1)

        assert cache.delete("a") is True
        assert cache.delete("a") is False
        assert cache.get("a") is None

    def test_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()

        assert len(cache) == 0

    def test_cleanup_expired(self, cache, clock):
        cache.set("old", 1, ttl=10)
        cache.set("fresh", 2, ttl=100)
        clock.advance(20)

        assert cache.cleanup_expired() == 1
        assert len(cache) == 1
        assert cache.get("fresh") == 2

    def test_statistics(self, cache):
        cache.set("a", 1)
        cache.get("a")
        cache.get("a")
        cache.get("missing")

        stats = cache.get_statistics()
        assert stats["hits"] == 2
        assert stats["misses"] == 1
        assert stats["writes"] == 1
        assert stats["entry_count"] == 1
        assert stats["max_size"] == 3
        assert stats["default_ttl"] == 60
        assert stats["hit_rate"] == pytest.approx(2 / 3)

    def test_keys_are_hashed(self):
        key = ResponseCache.make_key("model", "note")
        assert len(key) == 32
        assert key == ResponseCache.make_key("model", "note")
        assert key != ResponseCache.make_key("modelnote")

    @pytest.mark.parametrize("max_size", [0, -1])
    def test_invalid_size(self, max_size):
        with pytest.raises(CacheError):
            ResponseCache(max_size=max_size)
