"""Geocoding adapters - Implementations of GeocoderPort.

Available implementations:
- GoogleGeocoderAdapter: Google Maps Geocoding API
- NominatimGeocoderAdapter: OpenStreetMap Nominatim geocoding
- StaticFallbackTable: hardcoded last-resort city table
"""

from .google_adapter import GoogleGeocoderAdapter
from .nominatim_adapter import NominatimGeocoderAdapter
from .static_table import DEFAULT_PLACES, FallbackPlace, StaticFallbackTable

__all__ = [
    "GoogleGeocoderAdapter",
    "NominatimGeocoderAdapter",
    "StaticFallbackTable",
    "FallbackPlace",
    "DEFAULT_PLACES",
]
