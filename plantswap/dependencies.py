"""
FastAPI dependencies for the process-wide cache and geocoder.

Both are built once in the application lifespan and stored on app.state;
handlers receive them through Depends() instead of importing globals.
"""
from typing import Optional

from fastapi import Request

from plantswap.cache import TTLCacheStore
from plantswap.geo import Geocoder


def get_api_cache(request: Request) -> Optional[TTLCacheStore]:
    """API response cache, or None when caching is disabled."""
    return request.app.state.api_cache


def get_geocoder(request: Request) -> Geocoder:
    return request.app.state.geocoder
