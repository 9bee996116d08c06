"""
Zip code geocoding and distance-based search.
"""
from .models import Coordinate, Found, NotFound, NotFoundReason, GeocodeResult, WithDistance
from .errors import (
    GeocodingError,
    MalformedZipError,
    ProviderTimeout,
    ProviderError,
    ProvidersExhausted,
)
from .providers import (
    GeocodingProvider,
    GoogleGeocodingProvider,
    NominatimProvider,
    RegionalApproximationProvider,
    build_default_providers,
)
from .geocoder import Geocoder, clean_zip, GEOCODE_CACHE_TTL_MS
from .distance import (
    BoundingBox,
    calculate_distance,
    bounding_box,
    candidate_cap,
    filter_by_distance,
)

__all__ = [
    # Types
    "Coordinate",
    "Found",
    "NotFound",
    "NotFoundReason",
    "GeocodeResult",
    "WithDistance",
    # Errors
    "GeocodingError",
    "MalformedZipError",
    "ProviderTimeout",
    "ProviderError",
    "ProvidersExhausted",
    # Providers
    "GeocodingProvider",
    "GoogleGeocodingProvider",
    "NominatimProvider",
    "RegionalApproximationProvider",
    "build_default_providers",
    # Geocoder
    "Geocoder",
    "clean_zip",
    "GEOCODE_CACHE_TTL_MS",
    # Distance
    "BoundingBox",
    "calculate_distance",
    "bounding_box",
    "candidate_cap",
    "filter_by_distance",
]
