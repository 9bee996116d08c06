"""
In-process API response cache with per-endpoint TTLs and substring invalidation.
"""
from .core import CacheEntry, now_ms
from .store import TTLCacheStore
from .sweeper import CacheSweeper
from .keys import generate_key
from .ttl_policies import CACHE_TTL_MS, DEFAULT_TTL_MS, get_cache_ttl
from .middleware import cached_json, invalidate_cache

__all__ = [
    # Core types
    "CacheEntry",
    "now_ms",
    # Store
    "TTLCacheStore",
    "CacheSweeper",
    # Keys and TTL policies
    "generate_key",
    "CACHE_TTL_MS",
    "DEFAULT_TTL_MS",
    "get_cache_ttl",
    # Request helpers
    "cached_json",
    "invalidate_cache",
]
