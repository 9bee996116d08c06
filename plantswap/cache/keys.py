"""
Deterministic cache keys from a request path and its parameters.
"""
from typing import Any, Mapping, Optional


def _render_value(value: Any) -> str:
    """Render a parameter value the way it appears in a query string."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def generate_key(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Build a cache key from a path and a parameter mapping.

    Parameter names are sorted, so two mappings with the same items in a
    different insertion order produce the same key.

    Examples:
        generate_key("/api/trades") -> "/api/trades"
        generate_key("/api/trades", {"zip": "10001", "radius": 50})
            -> "/api/trades?radius=50&zip=10001"
    """
    if not params:
        return path

    sorted_params = "&".join(
        f"{name}={_render_value(params[name])}" for name in sorted(params)
    )
    return f"{path}?{sorted_params}"
