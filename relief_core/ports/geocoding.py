"""Geocoding port - Abstraction for turning place names into coordinates.

This protocol defines the contract for a single geocoding backend,
allowing different implementations (Google Maps, Nominatim, ...) to be
ordered and swapped inside the provider chain.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import GeocodeHit


class GeocoderPort(Protocol):
    """Port for geocoding services.

    Implementations:
    - adapters/geocoding/google_adapter.py (GoogleGeocoderAdapter)
    - adapters/geocoding/nominatim_adapter.py (NominatimGeocoderAdapter)
    """

    name: str

    def geocode(self, query: str) -> Optional[GeocodeHit]:
        """Geocode a location query to coordinates.

        Args:
            query: The location name to geocode (e.g., "Manhattan, NYC").

        Returns:
            GeocodeHit, or None if the provider found nothing.

        Raises:
            ProviderError: On timeout or transport failure.
        """
        ...

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        """Reverse geocode coordinates to a human-readable address.

        Args:
            latitude: Latitude in degrees.
            longitude: Longitude in degrees.

        Returns:
            Address string, or None if not found.

        Raises:
            ProviderError: On timeout or transport failure.
        """
        ...
