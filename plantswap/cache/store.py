"""
In-process TTL key/value store with substring invalidation.
"""
import threading
import logging
from typing import Any, Callable, Dict, Optional

from .core import CacheEntry, now_ms

logger = logging.getLogger("cache.store")

DEFAULT_ENTRY_TTL_MS = 60000


class TTLCacheStore:
    """
    Process-local key/value store where every entry carries its own TTL.

    - Expired entries are evicted lazily on read and by cleanup()
    - set() always overwrites and restarts the entry's lifetime
    - invalidate() drops every key containing a substring (O(n) scan)

    Nothing here does I/O, so none of the operations can fail. State is
    lost on restart; callers must tolerate cold misses.
    """

    def __init__(
        self,
        name: str = "api",
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the store.

        Args:
            name: Label used in logs and stats
            clock: Returns the current time in epoch milliseconds
        """
        self.name = name
        self._clock = clock or now_ms
        self._cache: Dict[str, CacheEntry] = {}
        self._cache_lock = threading.RLock()

        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "invalidated": 0,
            "expired": 0,
        }

    def get(self, key: str) -> Optional[Any]:
        """
        Return the cached value, or None when absent or expired.

        An expired entry is removed as part of the read.
        """
        with self._cache_lock:
            entry = self._cache.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None

            if entry.is_expired(self._clock()):
                del self._cache[key]
                self._stats["expired"] += 1
                self._stats["misses"] += 1
                logger.debug(f"[{self.name}] CACHE EXPIRED: {key}")
                return None

            self._stats["hits"] += 1
            logger.debug(f"[{self.name}] CACHE HIT: {key}")
            return entry.data

    def set(self, key: str, data: Any, ttl: int = DEFAULT_ENTRY_TTL_MS) -> None:
        """Store data under key for ttl milliseconds, replacing any existing entry."""
        entry = CacheEntry(data=data, timestamp=self._clock(), ttl=ttl)
        with self._cache_lock:
            self._cache[key] = entry
            self._stats["sets"] += 1

    def invalidate(self, pattern: str) -> int:
        """
        Invalidate all cache entries whose key contains pattern.

        Args:
            pattern: Substring to match in cache keys

        Returns:
            Number of entries invalidated
        """
        with self._cache_lock:
            to_delete = [k for k in self._cache if pattern in k]
            for key in to_delete:
                del self._cache[key]
            self._stats["invalidated"] += len(to_delete)
        if to_delete:
            logger.info(f"[{self.name}] Invalidated {len(to_delete)} entries matching '{pattern}'")
        return len(to_delete)

    def clear(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries cleared
        """
        with self._cache_lock:
            count = len(self._cache)
            self._cache.clear()
        logger.info(f"[{self.name}] Cleared {count} cache entries")
        return count

    def cleanup(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        with self._cache_lock:
            expired = [k for k, entry in self._cache.items() if entry.is_expired(now)]
            for key in expired:
                del self._cache[key]
            self._stats["expired"] += len(expired)
        if expired:
            logger.debug(f"[{self.name}] Swept {len(expired)} expired entries")
        return len(expired)

    def __len__(self) -> int:
        with self._cache_lock:
            return len(self._cache)

    def __contains__(self, key: str) -> bool:
        # Presence only; does not check expiry or touch stats
        with self._cache_lock:
            return key in self._cache

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._cache_lock:
            lookups = self._stats["hits"] + self._stats["misses"]
            hit_rate = (self._stats["hits"] / lookups * 100) if lookups > 0 else 0

            return {
                "name": self.name,
                "entries": len(self._cache),
                **self._stats,
                "hit_rate_percent": round(hit_rate, 1),
            }
