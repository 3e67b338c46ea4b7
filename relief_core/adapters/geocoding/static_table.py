"""Hardcoded last-resort coordinates for a handful of major cities.

Used only after every live provider has failed. Matching is a
case-insensitive substring test against the subject, in table order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from ...domain.models import SOURCE_FALLBACK_TABLE, ResolvedLocation


@dataclass(frozen=True, slots=True)
class FallbackPlace:
    """One table row.

    Attributes:
        keyword: Lower-case substring matched against subjects
        label: Display name used for reverse lookups
        latitude: Latitude in degrees
        longitude: Longitude in degrees
        radius: Match radius in degrees for reverse lookups
    """

    keyword: str
    label: str
    latitude: float
    longitude: float
    radius: float = 0.3


DEFAULT_PLACES: tuple[FallbackPlace, ...] = (
    FallbackPlace("manhattan", "Manhattan, New York, NY", 40.7829, -73.9654, 0.1),
    FallbackPlace("nyc", "New York, NY", 40.7128, -74.0060, 0.5),
    FallbackPlace("los angeles", "Los Angeles, CA", 34.0522, -118.2437, 0.5),
    FallbackPlace("chicago", "Chicago, IL", 41.8781, -87.6298, 0.3),
    FallbackPlace("houston", "Houston, TX", 29.7604, -95.3698, 0.3),
)


class StaticFallbackTable:
    """Substring lookup over a fixed set of places."""

    def __init__(self, places: Sequence[FallbackPlace] = DEFAULT_PLACES) -> None:
        self._places = tuple(places)

    def lookup(self, subject: str) -> Optional[ResolvedLocation]:
        """Return coordinates for the first place whose keyword occurs in `subject`."""
        key = subject.casefold()
        for place in self._places:
            if place.keyword in key:
                return ResolvedLocation(
                    latitude=place.latitude,
                    longitude=place.longitude,
                    formatted_address=subject,
                    source=SOURCE_FALLBACK_TABLE,
                )
        return None

    def nearest(self, latitude: float, longitude: float) -> Optional[str]:
        """Label of the closest place within its radius, if any."""
        best: Optional[tuple[float, FallbackPlace]] = None
        for place in self._places:
            distance = math.hypot(latitude - place.latitude, longitude - place.longitude)
            if distance <= place.radius and (best is None or distance < best[0]):
                best = (distance, place)
        return best[1].label if best else None
