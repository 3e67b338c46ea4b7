"""Tests for the geopy-backed geocoders and the static fallback table."""

from __future__ import annotations

import threading
import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from geopy.exc import GeocoderServiceError, GeocoderTimedOut

from relief_core.adapters.geocoding import (
    GoogleGeocoderAdapter,
    NominatimGeocoderAdapter,
    StaticFallbackTable,
)
from relief_core.config import GeocodingConfig
from relief_core.domain.errors import ConfigurationError, ProviderError
from relief_core.domain.models import SOURCE_FALLBACK_TABLE, GeocodeHit


@pytest.fixture
def geo_config() -> GeocodingConfig:
    return GeocodingConfig(rate_limit_delay=0.0, max_retries=0, error_wait_seconds=0.0)


def geopy_location(lat, lon, address):
    return SimpleNamespace(latitude=lat, longitude=lon, address=address)


class TestNominatimGeocoderAdapter:
    """Test suite for NominatimGeocoderAdapter."""

    def test_geocode_success(self, geo_config):
        with patch("relief_core.adapters.geocoding.nominatim_adapter.Nominatim") as nominatim:
            nominatim.return_value.geocode.return_value = geopy_location(
                41.8781, -87.6298, "Chicago, Cook County, Illinois, USA"
            )
            adapter = NominatimGeocoderAdapter(config=geo_config)

            hit = adapter.geocode("Chicago")

        assert hit == GeocodeHit(41.8781, -87.6298, "Chicago, Cook County, Illinois, USA")
        nominatim.assert_called_once_with(
            user_agent=geo_config.user_agent, timeout=geo_config.timeout_seconds
        )

    def test_geocode_no_result_returns_none(self, geo_config):
        with patch("relief_core.adapters.geocoding.nominatim_adapter.Nominatim") as nominatim:
            nominatim.return_value.geocode.return_value = None
            adapter = NominatimGeocoderAdapter(config=geo_config)

            assert adapter.geocode("Atlantis") is None

    def test_blank_query_skips_provider(self, geo_config):
        with patch("relief_core.adapters.geocoding.nominatim_adapter.Nominatim") as nominatim:
            adapter = NominatimGeocoderAdapter(config=geo_config)
            assert adapter.geocode("   ") is None
            nominatim.assert_not_called()

    def test_timeout_raises_provider_error(self, geo_config):
        with patch("relief_core.adapters.geocoding.nominatim_adapter.Nominatim") as nominatim:
            nominatim.return_value.geocode.side_effect = GeocoderTimedOut("slow")
            adapter = NominatimGeocoderAdapter(config=geo_config)

            with pytest.raises(ProviderError) as exc_info:
                adapter.geocode("Chicago")

        assert exc_info.value.timed_out is True
        assert exc_info.value.provider == "nominatim"

    def test_service_error_raises_provider_error(self, geo_config):
        with patch("relief_core.adapters.geocoding.nominatim_adapter.Nominatim") as nominatim:
            nominatim.return_value.geocode.side_effect = GeocoderServiceError("503")
            adapter = NominatimGeocoderAdapter(config=geo_config)

            with pytest.raises(ProviderError) as exc_info:
                adapter.geocode("Chicago")

        assert exc_info.value.timed_out is False

    def test_reverse_geocode(self, geo_config):
        with patch("relief_core.adapters.geocoding.nominatim_adapter.Nominatim") as nominatim:
            nominatim.return_value.reverse.return_value = geopy_location(
                29.76, -95.37, "Houston, Texas, USA"
            )
            adapter = NominatimGeocoderAdapter(config=geo_config)

            assert adapter.reverse_geocode(29.76, -95.37) == "Houston, Texas, USA"

    def test_concurrent_first_calls_build_one_geocoder(self, geo_config):
        def slow_nominatim(**kwargs):
            time.sleep(0.05)
            instance = MagicMock()
            instance.geocode.return_value = geopy_location(41.8781, -87.6298, "Chicago, IL")
            return instance

        with patch(
            "relief_core.adapters.geocoding.nominatim_adapter.Nominatim",
            side_effect=slow_nominatim,
        ) as nominatim:
            adapter = NominatimGeocoderAdapter(config=geo_config)
            threads = [
                threading.Thread(target=adapter.geocode, args=("Chicago",)) for _ in range(6)
            ]
            for t in threads:
                t.start()
            for t in threads:
                t.join(5.0)

        assert nominatim.call_count == 1


class TestGoogleGeocoderAdapter:
    """Test suite for GoogleGeocoderAdapter."""

    def test_requires_api_key(self, geo_config):
        adapter = GoogleGeocoderAdapter(config=geo_config)
        with pytest.raises(ConfigurationError):
            adapter.geocode("Chicago")

    def test_geocode_uses_api_key(self):
        config = GeocodingConfig(google_api_key="secret", timeout_seconds=3)
        with patch("relief_core.adapters.geocoding.google_adapter.GoogleV3") as google:
            google.return_value.geocode.return_value = geopy_location(
                34.05, -118.24, "Los Angeles, CA, USA"
            )
            adapter = GoogleGeocoderAdapter(config=config)

            hit = adapter.geocode("Los Angeles")

        google.assert_called_once_with(api_key="secret", timeout=3)
        assert hit is not None
        assert hit.formatted_address == "Los Angeles, CA, USA"


class TestStaticFallbackTable:
    """Test suite for StaticFallbackTable."""

    def test_substring_match_is_case_insensitive(self):
        location = StaticFallbackTable().lookup("Downtown HOUSTON area")
        assert location is not None
        assert (location.latitude, location.longitude) == (29.7604, -95.3698)
        assert location.formatted_address == "Downtown HOUSTON area"
        assert location.source == SOURCE_FALLBACK_TABLE

    def test_first_table_entry_wins(self):
        location = StaticFallbackTable().lookup("Manhattan, NYC")
        assert location is not None
        assert location.latitude == 40.7829

    def test_no_match(self):
        assert StaticFallbackTable().lookup("Springfield") is None

    def test_nearest_within_radius(self):
        table = StaticFallbackTable()
        assert table.nearest(41.88, -87.63) == "Chicago, IL"
        assert table.nearest(0.0, 0.0) is None
