"""
Geode Discord Bot - Cache Utilities
===================================

TTL cache used to remember resolved Discord users.
"""

from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Generic, Optional, Tuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """
    A size-bounded cache whose entries expire after a fixed time.

    Safe for single-threaded async use. When full, the entry that was
    written longest ago is evicted.
    """

    def __init__(self, ttl: timedelta, max_size: int = 100):
        """
        Args:
            ttl: Time-to-live for cached items.
            max_size: Maximum number of items to store.
        """
        self._ttl = ttl
        self._max_size = max_size
        self._cache: "OrderedDict[K, Tuple[V, datetime]]" = OrderedDict()

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, key: K) -> Optional[V]:
        """
        Get an item if it exists and hasn't expired.

        Returns:
            The cached value or None if missing or expired.
        """
        entry = self._cache.get(key)
        if entry is None:
            return None

        value, cached_at = entry
        if datetime.now() - cached_at > self._ttl:
            self._cache.pop(key, None)
            return None

        return value

    def set(self, key: K, value: V) -> None:
        """Store an item, evicting the oldest write if at capacity."""
        if key in self._cache:
            del self._cache[key]
        elif len(self._cache) >= self._max_size:
            self._cache.popitem(last=False)

        self._cache[key] = (value, datetime.now())

    def delete(self, key: K) -> bool:
        """
        Remove an item.

        Returns:
            True if item was deleted, False if not found.
        """
        return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all items from the cache."""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: K) -> bool:
        return self.get(key) is not None


__all__ = ["TTLCache"]
