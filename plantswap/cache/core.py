"""
Core cache data structures.
"""
import time
from dataclasses import dataclass
from typing import Any


def now_ms() -> float:
    """Current wall-clock time in epoch milliseconds."""
    return time.time() * 1000


@dataclass
class CacheEntry:
    """
    A cached value with the moment it was stored and its lifetime.

    Both timestamp and ttl are in milliseconds.
    """
    data: Any
    timestamp: float
    ttl: int

    def age_ms(self, now: float) -> float:
        """Milliseconds since the entry was stored."""
        return now - self.timestamp

    def is_expired(self, now: float) -> bool:
        """An entry is expired once its age strictly exceeds its TTL."""
        return self.age_ms(now) > self.ttl
