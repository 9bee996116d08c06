"""
TTL configuration and endpoint-to-TTL mapping.
"""
from typing import Dict


DEFAULT_TTL_MS = 10000

# TTL by endpoint prefix (in milliseconds)
CACHE_TTL_MS: Dict[str, int] = {
    "/api/plants": 30000,                    # plant library changes rarely
    "/api/trades": 15000,                    # listings update more often
    "/api/forum": 20000,
    "/api/users": 60000,                     # profiles change rarely
    "/api/messages": 5000,                   # messages are near real-time
    "/api/messages/conversations": 10000,
}


def get_cache_ttl(endpoint: str) -> int:
    """
    Get the cache TTL for an endpoint path.

    The longest matching prefix wins, so "/api/messages/conversations"
    is not shadowed by "/api/messages".

    Args:
        endpoint: Request path (e.g., "/api/trades/my")

    Returns:
        TTL in milliseconds
    """
    best_prefix = ""
    ttl = DEFAULT_TTL_MS
    for prefix, prefix_ttl in CACHE_TTL_MS.items():
        if endpoint.startswith(prefix) and len(prefix) > len(best_prefix):
            best_prefix = prefix
            ttl = prefix_ttl
    return ttl
