"""Shared stubs and fixtures for the relief_core test suite."""

from __future__ import annotations

import threading
import time
from typing import Optional

import pytest

from relief_core.adapters.cache import InMemoryCache
from relief_core.adapters.storage import InMemoryDisasterRepository
from relief_core.domain.errors import ExtractionError
from relief_core.domain.models import GeocodeHit
from relief_core.services import (
    AuditLedger,
    DisasterService,
    EventBus,
    GeocodeProviderChain,
    LocationResolver,
)


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubGeocoder:
    """GeocoderPort stub counting calls.

    Returns `hit`, raises `error`, sleeps `delay` or blocks on `gate`
    before answering.
    """

    def __init__(
        self,
        name: str,
        hit: Optional[GeocodeHit] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        gate: Optional[threading.Event] = None,
    ) -> None:
        self.name = name
        self.hit = hit
        self.error = error
        self.delay = delay
        self.gate = gate
        self.calls = 0
        self.queries: list[str] = []
        self._lock = threading.Lock()

    def geocode(self, query: str) -> Optional[GeocodeHit]:
        with self._lock:
            self.calls += 1
            self.queries.append(query)
        if self.gate is not None:
            self.gate.wait(5.0)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.hit

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        return None


class StaticExtractor:
    def __init__(self, location: str) -> None:
        self.location = location
        self.calls = 0

    def extract_location(self, description: str) -> str:
        self.calls += 1
        return self.location


class FailingExtractor:
    def __init__(self) -> None:
        self.calls = 0

    def extract_location(self, description: str) -> str:
        self.calls += 1
        raise ExtractionError("extraction service unavailable", extractor="stub")


MANHATTAN_HIT = GeocodeHit(40.7831, -73.9712, "Manhattan, New York, NY, USA")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryCache:
    return InMemoryCache(name="test", default_ttl_seconds=3600, clock=clock)


@pytest.fixture
def failing_provider() -> StubGeocoder:
    return StubGeocoder("failing")


@pytest.fixture
def chain(failing_provider: StubGeocoder):
    chain = GeocodeProviderChain(providers=[failing_provider], timeout_seconds=2.0)
    yield chain
    chain.close()


@pytest.fixture
def bus():
    bus = EventBus()
    yield bus
    bus.close()


@pytest.fixture
def repository() -> InMemoryDisasterRepository:
    return InMemoryDisasterRepository()


@pytest.fixture
def service(chain, cache, repository, bus) -> DisasterService:
    resolver = LocationResolver(chain=chain, cache=cache, extractor=FailingExtractor())
    return DisasterService(
        resolver=resolver,
        repository=repository,
        ledger=AuditLedger(),
        publisher=bus,
    )
