"""
Result types for geocoding and distance search.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


class NotFoundReason(Enum):
    """Why a zip code could not be placed."""
    MALFORMED_INPUT = "malformed_input"
    PROVIDERS_EXHAUSTED = "providers_exhausted"


@dataclass(frozen=True)
class Found:
    """
    Successful lookup. source names the provider (or "cache").

    approximate is set when the coordinate is a regional placeholder.
    """
    coordinate: Coordinate
    source: str
    approximate: bool = False

    def __bool__(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"found": True, **self.coordinate.to_dict(), "source": self.source}


@dataclass(frozen=True)
class NotFound:
    """Failed lookup; the location is unknown."""
    reason: NotFoundReason

    def __bool__(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"found": False, "reason": self.reason.value}


GeocodeResult = Union[Found, NotFound]


@dataclass
class WithDistance(Generic[T]):
    """A search candidate paired with its distance from the centre (miles, 1 dp)."""
    item: T
    distance: float
