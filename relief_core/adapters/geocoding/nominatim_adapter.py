"""OpenStreetMap Nominatim geocoder adapter.

Nominatim's public endpoint asks clients for at most one request per
second, so calls go through geopy's RateLimiter. Exceptions are not
swallowed by the limiter; the provider chain decides what a failure means.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from .geopy_adapter import GeopyGeocoderAdapter


@dataclass
class NominatimGeocoderAdapter(GeopyGeocoderAdapter):
    """Nominatim geocoder adapter with rate limiting."""

    name: str = "nominatim"

    def _build_geolocator(self) -> Any:
        return Nominatim(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout_seconds,
        )

    def _wrap_geocode(self, geolocator: Any) -> Any:
        return RateLimiter(
            geolocator.geocode,
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=self.config.max_retries,
            error_wait_seconds=self.config.error_wait_seconds,
            swallow_exceptions=False,
        )
