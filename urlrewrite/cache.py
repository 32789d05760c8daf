"""
Caching layer for parsed rewrite rules.

Provides:
- Thread-safe LRU cache with TTL
- Rule text fingerprinting for cache keys
- Cache statistics
"""

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .language.ast_nodes import URLRewriteRule
from .language.grammar import parse_rule

logger = logging.getLogger("urlrewrite.cache")


@dataclass
class CacheStats:
    """Cache statistics for monitoring."""
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    errors: int = 0
    total_compile_time: float = 0.0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "errors": self.errors,
            "total_compile_time": self.total_compile_time,
            "hit_rate": self.hit_rate,
        }


@dataclass
class CacheEntry:
    """Cached rule with its insertion time."""
    rule: URLRewriteRule
    created_at: float

    def is_expired(self, ttl: Optional[float]) -> bool:
        if ttl is None:
            return False
        return time.time() - self.created_at > ttl


class RuleCache:
    """Thread-safe LRU cache of parsed rules with optional TTL."""

    def __init__(self, max_size: int = 256, ttl: Optional[float] = None):
        """
        Args:
            max_size: Maximum number of rules to keep
            ttl: Seconds before an entry expires (None = never)
        """
        self.max_size = max_size
        self.ttl = ttl

        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStats()

    @staticmethod
    def _fingerprint(text: str) -> str:
        return hashlib.sha256(text.strip().encode()).hexdigest()[:16]

    def get(self, text: str) -> Optional[URLRewriteRule]:
        """Return the cached rule for ``text`` or None."""
        key = self._fingerprint(text)

        with self._lock:
            entry = self._cache.get(key)

            if entry is None:
                self._stats.misses += 1
                return None

            if entry.is_expired(self.ttl):
                del self._cache[key]
                self._stats.evictions += 1
                self._stats.misses += 1
                return None

            self._cache.move_to_end(key)
            self._stats.hits += 1
            return entry.rule

    def put(self, text: str, rule: URLRewriteRule):
        """Store a parsed rule, evicting the least recently used one when full."""
        if self.max_size <= 0:
            return

        key = self._fingerprint(text)
        now = time.time()

        with self._lock:
            if len(self._cache) >= self.max_size and key not in self._cache:
                evicted, _ = self._cache.popitem(last=False)
                self._stats.evictions += 1
                logger.debug("Evicted rule %s", evicted)

            self._cache[key] = CacheEntry(rule=rule, created_at=now)
            self._cache.move_to_end(key)

    def compile_with_cache(self, text: str) -> URLRewriteRule:
        """
        Parse ``text``, reusing a cached rule when there is one.

        Raises:
            RuleSyntaxError: Invalid rule text
        """
        cached = self.get(text)
        if cached is not None:
            return cached

        start_time = time.time()
        try:
            rule = parse_rule(text.strip())
        except Exception:
            with self._lock:
                self._stats.errors += 1
            raise

        compile_time = time.time() - start_time
        self.put(text, rule)
        with self._lock:
            self._stats.total_compile_time += compile_time
        return rule

    def invalidate(self, text: Optional[str] = None):
        """Drop one rule, or every rule when ``text`` is None."""
        with self._lock:
            if text is None:
                self._cache.clear()
            else:
                self._cache.pop(self._fingerprint(text), None)

    def get_stats(self) -> CacheStats:
        """Snapshot of the statistics counters."""
        with self._lock:
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                evictions=self._stats.evictions,
                errors=self._stats.errors,
                total_compile_time=self._stats.total_compile_time,
            )

    def reset_stats(self):
        with self._lock:
            self._stats = CacheStats()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, text: str) -> bool:
        with self._lock:
            return self._fingerprint(text) in self._cache


# Global cache instance
_global_cache: Optional[RuleCache] = None


def get_global_cache() -> RuleCache:
    """Get or create global cache instance."""
    global _global_cache
    if _global_cache is None:
        _global_cache = RuleCache()
    return _global_cache


def set_global_cache(cache: Optional[RuleCache]):
    """Set global cache instance."""
    global _global_cache
    _global_cache = cache


def compile_rule(text: str, use_cache: bool = True) -> URLRewriteRule:
    """Parse rule text, through the global cache unless ``use_cache`` is False."""
    if use_cache:
        return get_global_cache().compile_with_cache(text)
    return parse_rule(text)
