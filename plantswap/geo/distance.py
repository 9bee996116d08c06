"""
Great-circle distance and the two-phase nearby search.

Phase 1 narrows candidates with a cheap lat/lng bounding box (done in SQL
by the caller); phase 2 computes exact haversine distances, drops
anything beyond the radius, sorts and truncates.
"""
import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

from .models import Coordinate, WithDistance

T = TypeVar("T")

EARTH_RADIUS_MILES = 3959
MILES_PER_DEGREE = 69
MAX_CANDIDATES = 500
CANDIDATE_MULTIPLIER = 3


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lat/lng box in decimal degrees."""
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return (
            self.min_lat <= lat <= self.max_lat
            and self.min_lng <= lng <= self.max_lng
        )


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Haversine distance in miles between two points.

    Symmetric, and zero for identical points.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def bounding_box(lat: float, lng: float, radius_miles: float) -> BoundingBox:
    """
    Box around a centre point that contains the whole search circle.

    Latitude uses radius / 69 degrees. Longitude uses the circle's widest
    east-west reach on the sphere, asin(sin(d) / cos(lat)) with d the
    angular radius. When the circle reaches a pole, or the argument is
    at least 1, the box spans every longitude.
    """
    lat_delta = radius_miles / MILES_PER_DEGREE
    min_lat = max(lat - lat_delta, -90.0)
    max_lat = min(lat + lat_delta, 90.0)

    angular_radius = radius_miles / EARTH_RADIUS_MILES
    cos_lat = math.cos(math.radians(lat))
    reaches_pole = min_lat <= -90.0 or max_lat >= 90.0

    if reaches_pole or cos_lat <= 0 or math.sin(angular_radius) >= cos_lat:
        return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lng=-180.0, max_lng=180.0)

    lng_delta = math.degrees(math.asin(math.sin(angular_radius) / cos_lat))
    return BoundingBox(
        min_lat=min_lat,
        max_lat=max_lat,
        min_lng=lng - lng_delta,
        max_lng=lng + lng_delta,
    )


def candidate_cap(limit: int) -> int:
    """Max rows fetched in phase 1 for a requested result limit."""
    return min(limit * CANDIDATE_MULTIPLIER, MAX_CANDIDATES)


def filter_by_distance(
    center: Coordinate,
    candidates: Iterable[T],
    radius_miles: float,
    limit: int,
    get_coordinates: Callable[[T], Tuple[Optional[float], Optional[float]]],
) -> List[WithDistance[T]]:
    """
    Exact-distance phase of the nearby search.

    Candidates with a missing latitude or longitude are skipped. Results
    are sorted nearest first; distances are rounded to one decimal.

    Args:
        center: Search centre
        candidates: Items from the bounding-box phase
        radius_miles: Maximum distance to keep
        limit: Maximum results returned
        get_coordinates: Extracts (lat, lng) from a candidate

    Returns:
        Up to limit WithDistance items
    """
    in_range: List[Tuple[float, T]] = []
    for candidate in candidates:
        lat, lng = get_coordinates(candidate)
        if lat is None or lng is None:
            continue

        distance = calculate_distance(center.lat, center.lng, lat, lng)
        if distance <= radius_miles:
            in_range.append((distance, candidate))

    in_range.sort(key=lambda pair: pair[0])
    return [
        WithDistance(item=candidate, distance=round(distance, 1))
        for distance, candidate in in_range[:limit]
    ]
