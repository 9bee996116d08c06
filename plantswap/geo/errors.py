"""
Geocoding error hierarchy.

These never leave the geocoder: providers raise them, Geocoder logs them
and moves on to the next provider.
"""


class GeocodingError(Exception):
    """Base class for geocoding failures."""
    pass


class MalformedZipError(GeocodingError):
    """Input does not contain a usable 5-digit zip code."""
    pass


class ProviderTimeout(GeocodingError):
    """A provider did not answer within its timeout."""

    def __init__(self, provider: str, timeout: float):
        super().__init__(f"{provider} timed out after {timeout}s")
        self.provider = provider
        self.timeout = timeout


class ProviderError(GeocodingError):
    """A provider failed (HTTP error, bad payload, unexpected status)."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ProvidersExhausted(GeocodingError):
    """Every provider in the chain failed to resolve the zip."""
    pass
