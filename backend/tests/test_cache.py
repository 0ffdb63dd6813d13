"""Tests for cache.py: TTL expiry, sweep-on-insert and FIFO eviction."""
from cadplan.cache import FifoTTLCache, SweepingTTLCache


class TestSweepingTTLCache:
    def test_hit_within_ttl(self, clock):
        cache = SweepingTTLCache(max_entries=100, ttl_seconds=300, clock=clock)
        cache.set("k", "v")
        clock.advance(299)
        assert cache.get("k") == "v"

    def test_expired_entry_not_returned(self, clock):
        cache = SweepingTTLCache(max_entries=100, ttl_seconds=300, clock=clock)
        cache.set("k", "v")
        clock.advance(300)
        assert cache.get("k") is None
        # still resident until a sweep
        assert "k" in cache

    def test_sweep_only_when_over_capacity(self, clock):
        cache = SweepingTTLCache(max_entries=2, ttl_seconds=300, clock=clock)
        cache.set("old", 1)
        clock.advance(360)
        cache.set("b", 2)
        assert "old" in cache

        cache.set("c", 3)
        assert "old" not in cache
        assert len(cache) == 2

    def test_live_entries_never_evicted(self, clock):
        cache = SweepingTTLCache(max_entries=2, ttl_seconds=300, clock=clock)
        for key in ("a", "b", "c", "d"):
            cache.set(key, key)
        assert len(cache) == 4
        assert cache.get("a") == "a"

    def test_stats(self, clock):
        cache = SweepingTTLCache(max_entries=100, ttl_seconds=300, clock=clock)
        cache.set("k", "v")
        assert cache.stats() == {"size": 1, "maxSize": 100, "ttlSeconds": 300}

    def test_clear(self, clock):
        cache = SweepingTTLCache(max_entries=100, clock=clock)
        cache.set("k", "v")
        cache.clear()
        assert len(cache) == 0


class TestFifoTTLCache:
    def test_51st_key_evicts_first(self, clock):
        cache = FifoTTLCache(max_entries=50, ttl_seconds=300, clock=clock)
        for i in range(51):
            cache.set(f"key-{i}", i)

        assert len(cache) == 50
        assert cache.get("key-0") is None
        for i in range(1, 51):
            assert cache.get(f"key-{i}") == i

    def test_access_does_not_refresh_order(self, clock):
        cache = FifoTTLCache(max_entries=2, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.get("a") == 1
        cache.set("c", 3)
        assert "a" not in cache
        assert cache.get("b") == 2

    def test_reinsert_moves_key_to_back(self, clock):
        cache = FifoTTLCache(max_entries=2, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        assert len(cache) == 2
        cache.set("c", 3)
        assert "b" not in cache
        assert cache.get("a") == 10

    def test_ttl_applies(self, clock):
        cache = FifoTTLCache(max_entries=50, ttl_seconds=300, clock=clock)
        cache.set("a", 1)
        clock.advance(301)
        assert cache.get("a") is None
