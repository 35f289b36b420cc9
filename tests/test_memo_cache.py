"""Tests for the bounded memo cache."""

import threading

import pytest

from entitytax.cache.memo_cache import MISSING, BoundedCache


class TestBoundedCache:

    def test_get_missing_key(self):
        cache = BoundedCache()
        assert cache.get("absent") is MISSING
        assert cache.get("absent", default=None) is None
        assert cache.get_stats()["misses"] == 2

    def test_none_is_a_cacheable_value(self):
        cache = BoundedCache()
        cache.set("key", None)
        assert "key" in cache
        assert cache.get("key") is None

    def test_evicts_oldest_insert(self):
        cache = BoundedCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert "a" not in cache
        assert "b" in cache
        assert "c" in cache
        assert cache.get_stats()["evictions"] == 1

    def test_overwrite_does_not_evict(self):
        cache = BoundedCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)

        assert len(cache) == 2
        assert cache.get("a") == 10
        assert cache.get_stats()["evictions"] == 0

    def test_delete_and_clear(self):
        cache = BoundedCache()
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.delete("a")
        assert not cache.delete("a")
        assert cache.clear() == 1
        assert len(cache) == 0

    def test_hit_rate(self):
        cache = BoundedCache()
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")
        stats = cache.get_stats()
        assert stats["hit_rate"] == 0.5
        assert stats["max_size"] == 50

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            BoundedCache(max_size=0)

    def test_concurrent_writers_respect_capacity(self):
        cache = BoundedCache(max_size=10)

        def writer(prefix):
            for i in range(200):
                cache.set(f"{prefix}-{i}", i)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) == 10
        assert cache.get_stats()["sets"] == 800
