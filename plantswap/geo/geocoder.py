"""
Zip code -> coordinate resolution through an ordered provider chain.
"""
import logging
import re
from typing import List, Optional, Tuple

from plantswap.cache import TTLCacheStore

from .errors import GeocodingError, MalformedZipError, ProvidersExhausted
from .models import Coordinate, Found, GeocodeResult, NotFound, NotFoundReason
from .providers import GeocodingProvider

logger = logging.getLogger("geo.geocoder")

GEOCODE_CACHE_TTL_MS = 24 * 60 * 60 * 1000
ZIP_LENGTH = 5

_NON_DIGITS = re.compile(r"[^0-9]")


def clean_zip(zip_code: Optional[str]) -> str:
    """
    Reduce user input to a 5-digit zip code.

    Non-digits are stripped and ZIP+4 input keeps its first five digits.

    Raises:
        MalformedZipError: Fewer than 5 digits, or all zeros
    """
    digits = _NON_DIGITS.sub("", zip_code or "")
    if len(digits) < ZIP_LENGTH:
        raise MalformedZipError(f"'{zip_code}' has fewer than {ZIP_LENGTH} digits")

    digits = digits[:ZIP_LENGTH]
    if int(digits) == 0:
        raise MalformedZipError(f"'{zip_code}' is not a valid zip code")
    return digits


class Geocoder:
    """
    Resolves zip codes with a 24 hour coordinate cache in front of a
    provider chain.

    Providers are tried in order; the first one that returns a Coordinate
    wins. Real lookups are cached; approximate placeholders are not, so a
    provider outage does not pin a zip to a placeholder.

    Timeouts and errors are logged and the next provider runs. Nothing is
    retried and no exception reaches the caller: failures come back as
    NotFound.
    """

    def __init__(
        self,
        providers: List[GeocodingProvider],
        cache: Optional[TTLCacheStore] = None,
        cache_ttl_ms: int = GEOCODE_CACHE_TTL_MS,
    ):
        self._providers = list(providers)
        self._cache = cache if cache is not None else TTLCacheStore(name="geocode")
        self._cache_ttl_ms = cache_ttl_ms

    @property
    def cache(self) -> TTLCacheStore:
        return self._cache

    @property
    def provider_names(self) -> List[str]:
        return [p.name for p in self._providers]

    def get_coordinates_from_zip(self, zip_code: Optional[str]) -> GeocodeResult:
        """
        Resolve a zip code to coordinates.

        Args:
            zip_code: Raw user input ("10001", "10001-1234", " 10001 ")

        Returns:
            Found(coordinate, source, approximate) or NotFound(reason)
        """
        try:
            cleaned = clean_zip(zip_code)
        except MalformedZipError as e:
            logger.warning(f"Malformed zip code: {e}")
            return NotFound(NotFoundReason.MALFORMED_INPUT)

        cached = self._cache.get(cleaned)
        if cached is not None:
            return Found(coordinate=cached, source="cache")

        try:
            coordinate, provider = self._resolve(cleaned)
        except ProvidersExhausted as e:
            logger.warning(str(e))
            return NotFound(NotFoundReason.PROVIDERS_EXHAUSTED)

        if provider.approximate:
            logger.info(f"Not caching approximate coordinate for {cleaned}")
            return Found(coordinate=coordinate, source=provider.name, approximate=True)

        self._cache.set(cleaned, coordinate, self._cache_ttl_ms)
        return Found(coordinate=coordinate, source=provider.name)

    def _resolve(self, zip_code: str) -> Tuple[Coordinate, GeocodingProvider]:
        """Walk the provider chain. Returns (coordinate, provider that answered)."""
        for provider in self._providers:
            try:
                coordinate = provider.resolve(zip_code)
            except GeocodingError as e:
                logger.warning(f"Geocoding provider failed for {zip_code}: {e}")
                continue
            except Exception as e:
                logger.warning(
                    f"Unexpected error from provider '{provider.name}' for {zip_code}: {e}"
                )
                continue

            if coordinate is None:
                logger.info(f"No result from '{provider.name}' for {zip_code}")
                continue

            logger.info(
                f"Geocoded {zip_code} via '{provider.name}' -> "
                f"({coordinate.lat:.4f}, {coordinate.lng:.4f})"
            )
            return coordinate, provider

        raise ProvidersExhausted(
            f"All geocoding providers failed for {zip_code} "
            f"(tried: {', '.join(self.provider_names) or 'none'})"
        )
