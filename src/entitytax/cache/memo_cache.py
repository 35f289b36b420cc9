"""
Bounded in-memory memo cache.

Fixed-capacity map that evicts the oldest inserted entry when full. Owned
by whoever needs memoization (the comparator keeps one for crossover
results) rather than living as a module global, so tests get a fresh
instance and threaded hosts share one lock-guarded instance.
"""

import logging
import threading
from typing import Any, Dict

logger = logging.getLogger(__name__)

# Returned by get() when a key is absent; lets callers cache None itself.
MISSING = object()


class BoundedCache:
    """
    Thread-safe, fixed-capacity cache with oldest-first eviction.

    Entries never expire; only capacity pressure removes them.
    """

    def __init__(self, max_size: int = 50):
        """
        Initialize cache.

        Args:
            max_size: Maximum number of entries kept
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._cache: Dict[str, Any] = {}
        self._lock = threading.RLock()
        self._max_size = max_size
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "evictions": 0,
        }

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, key: str, default: Any = MISSING) -> Any:
        """
        Get value from cache.

        Args:
            key: Cache key
            default: Value returned when the key is absent

        Returns:
            Cached value or default
        """
        with self._lock:
            if key not in self._cache:
                self._stats["misses"] += 1
                return default
            self._stats["hits"] += 1
            return self._cache[key]

    def set(self, key: str, value: Any) -> None:
        """
        Store a value, evicting the oldest entry if the cache is full.

        Overwriting an existing key keeps its original position.
        """
        with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_size:
                oldest = next(iter(self._cache))
                del self._cache[oldest]
                self._stats["evictions"] += 1
                logger.debug(f"Evicted oldest cache entry: {oldest[:80]}")
            self._cache[key] = value
            self._stats["sets"] += 1

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def delete(self, key: str) -> bool:
        """
        Delete key from cache.

        Returns:
            True if key existed, False otherwise
        """
        with self._lock:
            if key in self._cache:
                del self._cache[key]
                return True
            return False

    def clear(self) -> int:
        """
        Clear all cached entries.

        Returns:
            Number of entries cleared
        """
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            return count

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total = self._stats["hits"] + self._stats["misses"]
            hit_rate = self._stats["hits"] / total if total > 0 else 0
            return {
                **self._stats,
                "size": len(self._cache),
                "max_size": self._max_size,
                "hit_rate": round(hit_rate, 4),
            }
