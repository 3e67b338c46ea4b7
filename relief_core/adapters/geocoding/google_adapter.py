"""Google Maps Geocoding API adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from geopy.geocoders import GoogleV3

from ...domain.errors import ConfigurationError
from .geopy_adapter import GeopyGeocoderAdapter


@dataclass
class GoogleGeocoderAdapter(GeopyGeocoderAdapter):
    """Google Maps geocoder. Requires RELIEF_GEO_GOOGLE_API_KEY."""

    name: str = "google"

    def _build_geolocator(self) -> Any:
        if not self.config.google_api_key:
            raise ConfigurationError(
                "Google geocoding requires an API key",
                setting_name="RELIEF_GEO_GOOGLE_API_KEY",
            )
        return GoogleV3(
            api_key=self.config.google_api_key,
            timeout=self.config.timeout_seconds,
        )
