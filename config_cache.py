"""Per-turn memoization of parsed records."""

from typing import Any, Callable, Dict, Generic, TypeVar

from logger import log

T = TypeVar("T")


class TurnCache(Generic[T]):
    """
    Memo of values keyed by record name, valid for a single turn.

    Entries never expire on their own. The owner calls ``clear()`` at the
    start of every turn and ``invalidate()`` whenever a record is rewritten,
    so a value parsed during one turn is never served in the next.
    """

    def __init__(self, name: str = "turn") -> None:
        """
        Initialize an empty cache.

        Args:
            name: Label used in debug logging
        """
        self._name = name
        self._cache: Dict[str, T] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: str, getter_func: Callable[[], T]) -> T:
        """
        Get a cached value or compute and cache it if not found.

        Args:
            key: Cache key (usually a record name)
            getter_func: Function to compute value if not cached

        Returns:
            Cached or newly computed value
        """
        if key in self._cache:
            self._hits += 1
            return self._cache[key]

        self._misses += 1
        value = getter_func()
        self._cache[key] = value
        return value

    def contains(self, key: str) -> bool:
        return key in self._cache

    def invalidate(self, key: str) -> None:
        """Drop a single cached value."""
        if key in self._cache:
            del self._cache[key]
            log(f"[{self._name}-cache] invalidated {key}", level="DEBUG")

    def clear(self) -> None:
        """Clear all cached values."""
        self._cache.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache performance statistics."""
        return {
            "cache_size": len(self._cache),
            "hit_rate": self._hits / (self._hits + self._misses)
            if (self._hits + self._misses) > 0
            else 0,
            "hits": self._hits,
            "misses": self._misses,
        }
