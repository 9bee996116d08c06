"""
Geocoding providers.

Each provider turns a cleaned 5-digit zip code into a Coordinate. The
Geocoder walks an ordered list of them and stops at the first success:

    GoogleGeocodingProvider        (only when an API key is configured)
    NominatimProvider              (free OpenStreetMap service)
    RegionalApproximationProvider  (pure computation, last resort)

resolve() returns None when the provider has no answer, and raises
ProviderTimeout / ProviderError when the provider itself failed.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from .errors import ProviderError, ProviderTimeout
from .models import Coordinate
from .regions import ZIP_REGION_BANDS

logger = logging.getLogger("geo.providers")

DEFAULT_TIMEOUT_SECONDS = 5.0


class GeocodingProvider(ABC):
    """
    Common interface for every stage of the provider chain.

    approximate marks providers whose answers are placeholders rather than
    real lookups; the Geocoder never caches those.
    """

    approximate = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in logs and as the result source."""
        pass

    @abstractmethod
    def resolve(self, zip_code: str) -> Optional[Coordinate]:
        """
        Look up a cleaned 5-digit zip code.

        Returns:
            Coordinate, or None when the provider has no result

        Raises:
            ProviderTimeout: The provider did not answer in time
            ProviderError: The provider failed or returned garbage
        """
        pass


class HTTPGeocodingProvider(GeocodingProvider):
    """Shared request handling for providers backed by a JSON HTTP API."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._session = session or requests.Session()
        self._timeout = timeout

    def _get_json(
        self,
        url: str,
        params: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        try:
            response = self._session.get(
                url,
                params=params,
                headers=headers,
                timeout=self._timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.Timeout:
            raise ProviderTimeout(self.name, self._timeout)
        except requests.RequestException as e:
            raise ProviderError(self.name, str(e))
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON: {e}")


class GoogleGeocodingProvider(HTTPGeocodingProvider):
    """Google Maps Geocoding API (requires an API key)."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://maps.googleapis.com/maps/api/geocode/json",
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(session=session, timeout=timeout)
        self._api_key = api_key
        self._base_url = base_url

    @property
    def name(self) -> str:
        return "google"

    def resolve(self, zip_code: str) -> Optional[Coordinate]:
        data = self._get_json(
            self._base_url,
            params={
                "address": zip_code,
                "components": "country:US",
                "key": self._api_key,
            },
        )

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return None
        if status != "OK":
            # REQUEST_DENIED, OVER_QUERY_LIMIT, INVALID_REQUEST, ...
            raise ProviderError(self.name, f"status {status}: {data.get('error_message', '')}")

        results = data.get("results") or []
        if not results:
            return None

        try:
            location = results[0]["geometry"]["location"]
            return Coordinate(lat=float(location["lat"]), lng=float(location["lng"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(self.name, f"unexpected payload: {e}")


class NominatimProvider(HTTPGeocodingProvider):
    """OpenStreetMap Nominatim postal-code search (no key, needs a User-Agent)."""

    def __init__(
        self,
        base_url: str = "https://nominatim.openstreetmap.org",
        user_agent: str = "plantswap-geocoder/0.1",
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(session=session, timeout=timeout)
        self._search_url = f"{base_url.rstrip('/')}/search"
        self._user_agent = user_agent

    @property
    def name(self) -> str:
        return "nominatim"

    def resolve(self, zip_code: str) -> Optional[Coordinate]:
        data = self._get_json(
            self._search_url,
            params={
                "postalcode": zip_code,
                "countrycodes": "us",
                "format": "json",
                "limit": 1,
            },
            headers={"User-Agent": self._user_agent},
        )

        if not isinstance(data, list):
            raise ProviderError(self.name, f"expected a list, got {type(data).__name__}")
        if not data:
            return None

        try:
            return Coordinate(lat=float(data[0]["lat"]), lng=float(data[0]["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(self.name, f"unexpected payload: {e}")


class RegionalApproximationProvider(GeocodingProvider):
    """
    Deterministic pseudo-coordinate inside a rough regional band.

    The leading digit picks the band; the zip's lower digits place the point
    inside it. Never a real lookup: a placeholder so well-formed US zips
    almost always get some location. Swap in a zip-centroid dataset if
    precision matters.
    """

    approximate = True

    @property
    def name(self) -> str:
        return "regional_approximation"

    def resolve(self, zip_code: str) -> Optional[Coordinate]:
        band = ZIP_REGION_BANDS.get(zip_code[:1])
        if band is None or not zip_code.isdigit():
            return None

        lat_min, lat_max, lng_min, lng_max = band
        zip_num = int(zip_code)

        lat_fraction = (zip_num % 1000) / 1000
        lng_fraction = ((zip_num // 100) % 1000) / 1000

        lat = lat_min + lat_fraction * (lat_max - lat_min)
        lng = lng_min + lng_fraction * (lng_max - lng_min)
        return Coordinate(lat=round(lat, 4), lng=round(lng, 4))


def build_default_providers(
    google_api_key: Optional[str] = None,
    google_url: str = "https://maps.googleapis.com/maps/api/geocode/json",
    nominatim_url: str = "https://nominatim.openstreetmap.org",
    user_agent: str = "plantswap-geocoder/0.1",
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    session: Optional[requests.Session] = None,
) -> List[GeocodingProvider]:
    """
    Build the provider chain in resolution order.

    The Google provider is only included when an API key is given.
    """
    session = session or requests.Session()
    providers: List[GeocodingProvider] = []

    if google_api_key:
        providers.append(GoogleGeocodingProvider(
            api_key=google_api_key,
            base_url=google_url,
            session=session,
            timeout=timeout,
        ))
    else:
        logger.info("GOOGLE_MAPS_API_KEY not set - skipping Google geocoding")

    providers.append(NominatimProvider(
        base_url=nominatim_url,
        user_agent=user_agent,
        session=session,
        timeout=timeout,
    ))
    providers.append(RegionalApproximationProvider())
    return providers
