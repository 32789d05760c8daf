"""
Tests for the rule cache.
"""

import pytest

from urlrewrite.cache import RuleCache, compile_rule, get_global_cache
from urlrewrite.diagnostics.errors import RuleSyntaxError


class TestRuleCache:
    """Test caching of parsed rules."""

    def test_miss_then_hit(self):
        cache = RuleCache()
        first = cache.compile_with_cache("/a | /b")
        second = cache.compile_with_cache("/a | /b")

        assert first is second
        stats = cache.get_stats()
        assert stats.misses == 1
        assert stats.hits == 1
        assert stats.hit_rate == 0.5

    def test_surrounding_whitespace_shares_entry(self):
        cache = RuleCache()
        rule = cache.compile_with_cache("  /a | /b\n")
        assert cache.compile_with_cache("/a | /b") is rule
        assert len(cache) == 1

    def test_lru_eviction(self):
        cache = RuleCache(max_size=2)
        cache.compile_with_cache("/a | /x")
        cache.compile_with_cache("/b | /x")
        cache.compile_with_cache("/a | /x")
        cache.compile_with_cache("/c | /x")

        assert "/a | /x" in cache
        assert "/b | /x" not in cache
        assert cache.get_stats().evictions == 1

    def test_ttl_expiry(self):
        cache = RuleCache(ttl=10)
        cache.compile_with_cache("/a | /b")
        for entry in cache._cache.values():
            entry.created_at -= 60

        assert cache.get("/a | /b") is None
        assert len(cache) == 0

    def test_syntax_errors_are_counted(self):
        cache = RuleCache()
        with pytest.raises(RuleSyntaxError):
            cache.compile_with_cache("/a")
        assert cache.get_stats().errors == 1
        assert len(cache) == 0

    def test_invalidate(self):
        cache = RuleCache()
        cache.compile_with_cache("/a | /b")
        cache.compile_with_cache("/c | /d")

        cache.invalidate("/a | /b")
        assert "/a | /b" not in cache
        assert len(cache) == 1

        cache.invalidate()
        assert len(cache) == 0

    def test_disabled_when_size_is_zero(self):
        cache = RuleCache(max_size=0)
        cache.compile_with_cache("/a | /b")
        assert len(cache) == 0

    def test_stats_to_dict(self):
        cache = RuleCache()
        cache.compile_with_cache("/a | /b")
        data = cache.get_stats().to_dict()
        assert data["misses"] == 1
        assert data["hit_rate"] == 0.0

        cache.reset_stats()
        assert cache.get_stats().misses == 0


class TestCompileRule:
    """Test the module-level helper."""

    def test_uses_global_cache(self):
        rule = compile_rule("/a | /b")
        assert "/a | /b" in get_global_cache()
        assert compile_rule("/a | /b") is rule

    def test_without_cache(self):
        rule = compile_rule("/a | /b", use_cache=False)
        assert "/a | /b" not in get_global_cache()
        assert rule.destination.to_pattern() == "/b"
