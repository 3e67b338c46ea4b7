"""Location resolver - extraction, caching and single-flight geocoding.

Turns a LocationQuery into coordinates:
1. Pick a subject string (explicit name, else extracted from the
   description, else the keyword heuristic).
2. Serve it from cache when possible.
3. Otherwise geocode through the provider chain, coalescing concurrent
   lookups of the same subject into one upstream call.

Nothing here raises for a failed lookup; callers get Unresolved.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from ..adapters.nlp.keyword_extractor import KeywordLocationExtractor
from ..domain.errors import CacheUnavailableError, ExtractionError
from ..domain.models import (
    SOURCE_CACHE,
    GeocodeOutcome,
    LocationQuery,
    ResolutionOutcome,
    ResolvedLocation,
    Unresolved,
    UnresolvedReason,
    normalize_subject,
)
from ..ports.cache import CachePort
from ..ports.nlp import LocationExtractorPort
from .geocode_chain import GeocodeProviderChain

DEFAULT_TTL_SECONDS = 3600.0


def geocode_cache_key(subject: str) -> str:
    return f"geocode:{normalize_subject(subject)}"


@dataclass
class LocationResolver:
    """Resolve location queries with caching and single-flight.

    Attributes:
        chain: Provider chain used on cache misses
        cache: Shared cache of resolved locations
        extractor: Primary extractor (e.g. Gemini); optional
        fallback_extractor: Heuristic used when the primary fails
        ttl_seconds: Lifetime of cached successes
    """

    chain: GeocodeProviderChain
    cache: CachePort[ResolvedLocation]
    extractor: Optional[LocationExtractorPort] = None
    fallback_extractor: LocationExtractorPort = field(
        default_factory=KeywordLocationExtractor
    )
    ttl_seconds: float = DEFAULT_TTL_SECONDS

    _in_flight: Dict[str, Future[GeocodeOutcome]] = field(
        default_factory=dict, repr=False
    )
    _in_flight_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def resolve(self, query: LocationQuery) -> ResolutionOutcome:
        """Resolve a query to coordinates.

        Returns:
            ResolvedLocation, or Unresolved when no subject could be found
            or every provider failed.
        """
        if query.is_empty:
            return Unresolved(reason=UnresolvedReason.NO_SUBJECT)

        subject = self.subject_for(query)
        if subject is None:
            self._logger.info("No location subject found")
            return Unresolved(reason=UnresolvedReason.NO_SUBJECT)

        key = geocode_cache_key(subject)
        cached = self._cache_get(key)
        if cached is not None:
            self._logger.debug("Geocode cache hit", extra={"key": key})
            return replace(cached, source=SOURCE_CACHE)

        outcome = self._geocode_once(key, subject)
        if isinstance(outcome, ResolvedLocation):
            return outcome
        return Unresolved(reason=UnresolvedReason.GEOCODE_FAILED, subject=subject)

    def subject_for(self, query: LocationQuery) -> Optional[str]:
        """Choose the string to geocode for a query, if any."""
        if query.location_name and query.location_name.strip():
            return query.location_name.strip()

        description = (query.description or "").strip()
        if not description:
            return None

        for extractor in (self.extractor, self.fallback_extractor):
            if extractor is None:
                continue
            name = type(extractor).__name__
            try:
                location = extractor.extract_location(description)
            except ExtractionError as e:
                self._logger.warning(
                    "Location extraction failed",
                    extra={"extractor": name, "error": str(e)},
                )
                continue
            except Exception as e:
                self._logger.error(
                    "Location extractor raised unexpected error",
                    extra={"extractor": name, "error": str(e)},
                )
                continue

            if location and location.strip():
                self._logger.info(
                    "Location extracted from description",
                    extra={"extractor": name, "location": location.strip()},
                )
                return location.strip()

        return None

    def reverse(self, latitude: float, longitude: float) -> str:
        """Describe coordinates as a place label."""
        return self.chain.reverse(latitude, longitude)

    def invalidate(self, subject: str) -> bool:
        """Drop the cached location for a subject."""
        key = geocode_cache_key(subject)
        try:
            return self.cache.delete(key)
        except Exception as e:
            self._logger.warning(
                "Cache unavailable, entry not deleted",
                extra={
                    "error": str(CacheUnavailableError("Cache delete failed", key=key, cause=e))
                },
            )
            return False

    def _geocode_once(self, key: str, subject: str) -> GeocodeOutcome:
        """Geocode `subject`, sharing one chain call among concurrent callers."""
        with self._in_flight_lock:
            future = self._in_flight.get(key)
            leader = future is None
            if future is None:
                # A leader that finished since our first read has already cached its result.
                cached = self._cache_get(key)
                if cached is not None:
                    return replace(cached, source=SOURCE_CACHE)
                future = Future()
                self._in_flight[key] = future

        if not leader:
            self._logger.debug("Joining in-flight geocode", extra={"key": key})
            return future.result()

        try:
            outcome = self.chain.geocode(subject)
            if isinstance(outcome, ResolvedLocation):
                self._cache_set(key, outcome)
            future.set_result(outcome)
            return outcome
        except BaseException as e:
            future.set_exception(e)
            raise
        finally:
            with self._in_flight_lock:
                self._in_flight.pop(key, None)

    def _cache_get(self, key: str) -> Optional[ResolvedLocation]:
        try:
            return self.cache.get(key)
        except Exception as e:
            self._logger.warning(
                "Cache unavailable, treating as miss",
                extra={
                    "error": str(CacheUnavailableError("Cache read failed", key=key, cause=e))
                },
            )
            return None

    def _cache_set(self, key: str, location: ResolvedLocation) -> None:
        try:
            self.cache.set(key, location, ttl=self.ttl_seconds)
        except Exception as e:
            self._logger.warning(
                "Cache unavailable, result not cached",
                extra={
                    "error": str(CacheUnavailableError("Cache write failed", key=key, cause=e))
                },
            )
