"""
Response caching helpers for GET handlers.
"""
import logging
from typing import Any, Callable, Optional

from fastapi import Request, Response

from .keys import generate_key
from .store import TTLCacheStore
from .ttl_policies import get_cache_ttl

logger = logging.getLogger("cache.middleware")

CACHE_CONTROL = "public, max-age=10, stale-while-revalidate=30"


def cached_json(
    request: Request,
    response: Response,
    cache: Optional[TTLCacheStore],
    handler: Callable[[], Any],
) -> Any:
    """
    Serve a handler's JSON body through the API cache.

    Only GET requests are cached. The key is the request path plus its
    sorted query parameters; the TTL comes from the endpoint table.
    Errors raised by the handler propagate and are never cached.

    Args:
        request: Incoming request (path, method and query params)
        response: Response whose headers get X-Cache / Cache-Control
        cache: API cache, or None when caching is disabled
        handler: Produces the JSON-serializable body on a miss

    Returns:
        The response body
    """
    if request.method != "GET" or cache is None:
        response.headers["X-Cache"] = "BYPASS"
        return handler()

    endpoint = request.url.path
    cache_key = generate_key(endpoint, dict(request.query_params))

    cached = cache.get(cache_key)
    if cached is not None:
        response.headers["X-Cache"] = "HIT"
        response.headers["Cache-Control"] = CACHE_CONTROL
        return cached

    data = handler()
    if data:
        cache.set(cache_key, data, get_cache_ttl(endpoint))
    else:
        logger.debug(f"Not caching empty response for {cache_key}")

    response.headers["X-Cache"] = "MISS"
    response.headers["Cache-Control"] = CACHE_CONTROL
    return data


def invalidate_cache(cache: Optional[TTLCacheStore], pattern: str) -> int:
    """Drop cached responses whose key contains pattern. Returns count removed."""
    if cache is None:
        return 0
    return cache.invalidate(pattern)
