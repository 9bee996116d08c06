"""
Unit tests for zip cleaning, the provider chain and individual providers.

HTTP providers get a Mock session, so no test touches the network.
"""
from unittest.mock import Mock

import pytest
import requests

from plantswap.cache import TTLCacheStore
from plantswap.geo import (
    Coordinate,
    Found,
    Geocoder,
    GoogleGeocodingProvider,
    MalformedZipError,
    NominatimProvider,
    NotFound,
    NotFoundReason,
    ProviderError,
    ProviderTimeout,
    RegionalApproximationProvider,
    build_default_providers,
    clean_zip,
)
from plantswap.geo.regions import ZIP_REGION_BANDS

from conftest import NYC, StubProvider


def _json_session(payload):
    """Mock requests.Session whose get() returns payload as JSON."""
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    session = Mock()
    session.get.return_value = response
    return session


# =============================================================================
# Zip cleaning
# =============================================================================

class TestCleanZip:
    """Tests for input normalization."""

    def test_plain_zip(self):
        assert clean_zip("10001") == "10001"

    def test_strips_non_digits(self):
        assert clean_zip(" 1000-1 ") == "10001"

    def test_zip_plus_four_keeps_first_five(self):
        assert clean_zip("10001-1234") == "10001"

    @pytest.mark.parametrize("raw", ["", "1234", "abcde", "12-34", None, "00000", "0000-0"])
    def test_malformed(self, raw):
        with pytest.raises(MalformedZipError):
            clean_zip(raw)


# =============================================================================
# Geocoder chain
# =============================================================================

class TestGeocoder:
    """Tests for the provider chain and its cache."""

    def test_found_from_first_provider(self, geocoder, stub_provider):
        result = geocoder.get_coordinates_from_zip("10001")

        assert isinstance(result, Found)
        assert result.coordinate == NYC
        assert result.source == "stub"
        assert stub_provider.calls == ["10001"]

    @pytest.mark.parametrize("raw", ["00000", "123", "", None, "abc"])
    def test_malformed_input_makes_no_provider_call(self, geocoder, stub_provider, raw):
        result = geocoder.get_coordinates_from_zip(raw)

        assert result == NotFound(NotFoundReason.MALFORMED_INPUT)
        assert not result
        assert stub_provider.calls == []

    def test_second_lookup_served_from_cache(self, geocoder, stub_provider):
        geocoder.get_coordinates_from_zip("10001")
        result = geocoder.get_coordinates_from_zip("10001-9999")

        assert result.source == "cache"
        assert result.coordinate == NYC
        assert stub_provider.calls == ["10001"]

    def test_cache_expires_after_ttl(self, clock, stub_provider):
        cache = TTLCacheStore(name="geocode", clock=clock)
        geocoder = Geocoder(providers=[stub_provider], cache=cache, cache_ttl_ms=1000)

        geocoder.get_coordinates_from_zip("10001")
        clock.advance(1001)
        result = geocoder.get_coordinates_from_zip("10001")

        assert result.source == "stub"
        assert stub_provider.calls == ["10001", "10001"]

    def test_falls_through_timeout_and_error(self):
        timing_out = StubProvider("slow", error=ProviderTimeout("slow", 5.0))
        broken = StubProvider("broken", error=ProviderError("broken", "HTTP 500"))
        empty = StubProvider("empty", coordinates={})
        good = StubProvider("good", coordinates={"10001": NYC})

        geocoder = Geocoder(providers=[timing_out, broken, empty, good])
        result = geocoder.get_coordinates_from_zip("10001")

        assert result == Found(coordinate=NYC, source="good")
        assert timing_out.calls == broken.calls == empty.calls == good.calls == ["10001"]

    def test_unexpected_exception_does_not_escape(self):
        crashing = StubProvider("crashing", error=RuntimeError("boom"))
        fallback = StubProvider("fallback", coordinates={"10001": NYC})

        result = Geocoder(providers=[crashing, fallback]).get_coordinates_from_zip("10001")

        assert result.source == "fallback"

    def test_stops_at_first_success(self):
        first = StubProvider("first", coordinates={"10001": NYC})
        second = StubProvider("second", coordinates={"10001": Coordinate(0.0, 0.0)})

        Geocoder(providers=[first, second]).get_coordinates_from_zip("10001")

        assert second.calls == []

    def test_all_providers_exhausted(self):
        geocoder = Geocoder(providers=[
            StubProvider("a", coordinates={}),
            StubProvider("b", error=ProviderError("b", "down")),
        ])

        result = geocoder.get_coordinates_from_zip("10001")

        assert result == NotFound(NotFoundReason.PROVIDERS_EXHAUSTED)
        assert len(geocoder.cache) == 0

    def test_approximate_result_is_not_cached(self):
        regional = RegionalApproximationProvider()
        geocoder = Geocoder(providers=[StubProvider("empty"), regional])

        result = geocoder.get_coordinates_from_zip("10001")

        assert result.source == "regional_approximation"
        assert result.approximate is True
        assert "10001" not in geocoder.cache

    def test_provider_recovers_after_outage(self):
        flaky = StubProvider("flaky", coordinates={"10001": NYC}, error=ProviderTimeout("flaky", 5.0))
        geocoder = Geocoder(providers=[flaky, RegionalApproximationProvider()])

        during_outage = geocoder.get_coordinates_from_zip("10001")
        flaky.error = None
        after_recovery = geocoder.get_coordinates_from_zip("10001")

        assert during_outage.approximate is True
        assert after_recovery == Found(coordinate=NYC, source="flaky")
        assert flaky.calls == ["10001", "10001"]
        assert geocoder.get_coordinates_from_zip("10001").source == "cache"

    def test_empty_chain_is_exhausted(self):
        result = Geocoder(providers=[]).get_coordinates_from_zip("10001")
        assert result.reason == NotFoundReason.PROVIDERS_EXHAUSTED

    def test_result_dicts(self, geocoder):
        assert geocoder.get_coordinates_from_zip("10001").to_dict() == {
            "found": True, "lat": 40.75, "lng": -74.0, "source": "stub",
        }
        assert geocoder.get_coordinates_from_zip("12").to_dict() == {
            "found": False, "reason": "malformed_input",
        }


# =============================================================================
# Google provider
# =============================================================================

class TestGoogleGeocodingProvider:
    """Tests for Google response handling."""

    def test_parses_first_result(self):
        session = _json_session({
            "status": "OK",
            "results": [{"geometry": {"location": {"lat": 40.7484, "lng": -73.9967}}}],
        })
        provider = GoogleGeocodingProvider(api_key="secret", session=session, timeout=5.0)

        assert provider.resolve("10001") == Coordinate(lat=40.7484, lng=-73.9967)

        _, kwargs = session.get.call_args
        assert kwargs["params"]["address"] == "10001"
        assert kwargs["params"]["key"] == "secret"
        assert kwargs["timeout"] == 5.0

    def test_zero_results_is_none(self):
        provider = GoogleGeocodingProvider(
            api_key="k", session=_json_session({"status": "ZERO_RESULTS", "results": []})
        )
        assert provider.resolve("10001") is None

    def test_denied_status_raises(self):
        provider = GoogleGeocodingProvider(
            api_key="k",
            session=_json_session({"status": "REQUEST_DENIED", "error_message": "bad key"}),
        )
        with pytest.raises(ProviderError):
            provider.resolve("10001")

    def test_timeout_raises_provider_timeout(self):
        session = Mock()
        session.get.side_effect = requests.Timeout("slow")
        provider = GoogleGeocodingProvider(api_key="k", session=session, timeout=5.0)

        with pytest.raises(ProviderTimeout):
            provider.resolve("10001")

    def test_http_error_raises_provider_error(self):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("503")
        session = Mock()
        session.get.return_value = response
        provider = GoogleGeocodingProvider(api_key="k", session=session)

        with pytest.raises(ProviderError):
            provider.resolve("10001")


# =============================================================================
# Nominatim provider
# =============================================================================

class TestNominatimProvider:
    """Tests for OpenStreetMap Nominatim response handling."""

    def test_parses_string_coordinates(self):
        session = _json_session([{"lat": "40.7506", "lon": "-73.9972"}])
        provider = NominatimProvider(user_agent="tests/1.0", session=session)

        assert provider.resolve("10001") == Coordinate(lat=40.7506, lng=-73.9972)

        args, kwargs = session.get.call_args
        assert args[0] == "https://nominatim.openstreetmap.org/search"
        assert kwargs["params"]["postalcode"] == "10001"
        assert kwargs["params"]["countrycodes"] == "us"
        assert kwargs["headers"]["User-Agent"] == "tests/1.0"

    def test_empty_list_is_none(self):
        provider = NominatimProvider(session=_json_session([]))
        assert provider.resolve("10001") is None

    def test_unexpected_shape_raises(self):
        provider = NominatimProvider(session=_json_session({"error": "nope"}))
        with pytest.raises(ProviderError):
            provider.resolve("10001")

    def test_connection_error_raises_provider_error(self):
        session = Mock()
        session.get.side_effect = requests.ConnectionError("unreachable")
        provider = NominatimProvider(session=session)

        with pytest.raises(ProviderError):
            provider.resolve("10001")


# =============================================================================
# Regional approximation
# =============================================================================

class TestRegionalApproximationProvider:
    """Tests for the last-resort pseudo-coordinates."""

    provider = RegionalApproximationProvider()

    def test_deterministic(self):
        assert self.provider.resolve("10001") == self.provider.resolve("10001")

    def test_different_zips_differ(self):
        assert self.provider.resolve("10001") != self.provider.resolve("10452")

    @pytest.mark.parametrize("zip_code", ["00501", "10001", "30301", "60601", "73301", "94105", "99999"])
    def test_point_inside_region_band(self, zip_code):
        lat_min, lat_max, lng_min, lng_max = ZIP_REGION_BANDS[zip_code[0]]
        coordinate = self.provider.resolve(zip_code)

        assert lat_min <= coordinate.lat <= lat_max
        assert lng_min <= coordinate.lng <= lng_max

    def test_non_digit_input_is_none(self):
        assert self.provider.resolve("abcde") is None


# =============================================================================
# Default chain
# =============================================================================

class TestBuildDefaultProviders:
    """Tests for provider selection from configuration."""

    def test_without_api_key(self):
        providers = build_default_providers(google_api_key=None, session=Mock())
        assert [p.name for p in providers] == ["nominatim", "regional_approximation"]

    def test_with_api_key(self):
        providers = build_default_providers(google_api_key="key", session=Mock())
        assert [p.name for p in providers] == ["google", "nominatim", "regional_approximation"]

    def test_network_down_falls_back_to_regional(self):
        session = Mock()
        session.get.side_effect = requests.Timeout("down")
        geocoder = Geocoder(providers=build_default_providers(google_api_key="key", session=session))

        result = geocoder.get_coordinates_from_zip("10001")

        assert result.source == "regional_approximation"
        assert session.get.call_count == 2
