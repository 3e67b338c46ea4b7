"""Shared plumbing for geocoders built on geopy.

Concrete adapters only decide which geopy geocoder to build; lazy
initialization, result conversion and error mapping live here.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from geopy.exc import GeocoderTimedOut, GeopyError

from ...config import GeocodingConfig, get_config
from ...domain.errors import ProviderError
from ...domain.models import GeocodeHit


@dataclass
class GeopyGeocoderAdapter:
    """Base adapter implementing GeocoderPort over a geopy geocoder.

    Attributes:
        config: Geocoding configuration
        name: Provider name used in logs and error reports
    """

    config: GeocodingConfig = field(default_factory=lambda: get_config().geocoding)
    name: str = "geopy"

    _geolocator: Optional[Any] = field(default=None, repr=False)
    _geocode_fn: Optional[Any] = field(default=None, repr=False)
    _init_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _build_geolocator(self) -> Any:
        raise NotImplementedError

    def _wrap_geocode(self, geolocator: Any) -> Any:
        """Hook for rate limiting; the plain bound method by default."""
        return geolocator.geocode

    def _get_geocoder(self) -> Any:
        """Get or initialize the geocode callable.

        Built once per adapter so that every caller shares one rate limiter.
        """
        with self._init_lock:
            if self._geocode_fn is not None:
                return self._geocode_fn

            self._logger.debug(
                "Initializing geocoder",
                extra={"provider": self.name, "timeout": self.config.timeout_seconds},
            )
            geolocator = self._build_geolocator()
            self._geocode_fn = self._wrap_geocode(geolocator)
            self._geolocator = geolocator
            return self._geocode_fn

    def geocode(self, query: str) -> Optional[GeocodeHit]:
        """Geocode a location query.

        Args:
            query: The location name to geocode.

        Returns:
            GeocodeHit, or None if the provider returned no result.

        Raises:
            ProviderError: On timeout or service failure.
        """
        if not query or not query.strip():
            return None

        geocode_fn = self._get_geocoder()
        try:
            location = geocode_fn(query, exactly_one=True)
        except GeocoderTimedOut as e:
            raise ProviderError(
                "Geocoder timed out",
                provider=self.name,
                query=query,
                timed_out=True,
                cause=e,
            )
        except GeopyError as e:
            raise ProviderError(
                "Geocoder service error",
                provider=self.name,
                query=query,
                cause=e,
            )

        if location is None:
            self._logger.debug(
                "Geocode returned no result",
                extra={"provider": self.name, "query": query},
            )
            return None

        hit = GeocodeHit(
            latitude=float(location.latitude),
            longitude=float(location.longitude),
            formatted_address=str(location.address),
        )
        self._logger.info(
            "Geocoded",
            extra={
                "provider": self.name,
                "query": query,
                "lat": hit.latitude,
                "lon": hit.longitude,
            },
        )
        return hit

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        """Reverse geocode coordinates to an address string.

        Raises:
            ProviderError: On timeout or service failure.
        """
        if self._geolocator is None:
            self._get_geocoder()

        try:
            result = self._geolocator.reverse(  # type: ignore[union-attr]
                (latitude, longitude), exactly_one=True
            )
        except GeopyError as e:
            raise ProviderError(
                "Reverse geocode failed",
                provider=self.name,
                query=f"{latitude},{longitude}",
                timed_out=isinstance(e, GeocoderTimedOut),
                cause=e,
            )

        if result is None:
            return None
        return str(result.address)
