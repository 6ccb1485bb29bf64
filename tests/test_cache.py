"""Tests for the per-scan link validity cache."""

from roamlint.cache import CacheKey, LinkValidityCache
from roamlint.models import INVALID, VALID


class TestLinkValidityCache:
    def test_lookup_miss_returns_none(self):
        cache = LinkValidityCache()
        assert cache.lookup(CacheKey("file", "/kb/a.org")) is None
        assert cache.hits == 0

    def test_store_then_lookup(self):
        cache = LinkValidityCache()
        key = CacheKey("roam", "Hub")
        cache.store(key, INVALID)

        assert cache.lookup(key) == INVALID
        assert key in cache
        assert len(cache) == 1
        assert cache.hits == 1

    def test_last_write_wins(self):
        cache = LinkValidityCache()
        key = CacheKey("file", "x.org")
        cache.store(key, INVALID)
        cache.store(key, VALID)

        assert cache.lookup(key) == VALID
        assert len(cache) == 1

    def test_colon_in_target_does_not_collide(self):
        """A target containing ':' never aliases a different type."""
        cache = LinkValidityCache()
        cache.store(CacheKey("a", "b:c"), VALID)

        assert CacheKey("a:b", "c") not in cache
        assert cache.lookup(CacheKey("a:b", "c")) is None

    def test_same_target_different_types_are_separate(self):
        cache = LinkValidityCache()
        cache.store(CacheKey("file", "x"), VALID)
        cache.store(CacheKey("roam", "x"), INVALID)

        assert cache.lookup(CacheKey("file", "x")) == VALID
        assert cache.lookup(CacheKey("roam", "x")) == INVALID
