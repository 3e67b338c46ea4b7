"""Tests for LocationResolver: caching, single-flight and extraction fallback."""

from __future__ import annotations

import threading
import time
from typing import Optional

import pytest

from relief_core.adapters.cache import InMemoryCache
from relief_core.domain.models import (
    LocationQuery,
    ResolvedLocation,
    Unresolved,
    UnresolvedReason,
)
from relief_core.services import GeocodeProviderChain, LocationResolver
from relief_core.services.location_resolver import geocode_cache_key

from conftest import MANHATTAN_HIT, FailingExtractor, StaticExtractor, StubGeocoder


@pytest.fixture
def provider() -> StubGeocoder:
    return StubGeocoder("stub", hit=MANHATTAN_HIT)


@pytest.fixture
def resolver(provider, cache):
    chain = GeocodeProviderChain(providers=[provider], timeout_seconds=2.0)
    yield LocationResolver(chain=chain, cache=cache, extractor=FailingExtractor())
    chain.close()


def test_cache_key_is_normalized():
    assert geocode_cache_key("  Manhattan ") == geocode_cache_key("MANHATTAN")


def test_empty_query_is_unresolved(resolver, provider):
    outcome = resolver.resolve(LocationQuery(description="  ", location_name=""))
    assert outcome == Unresolved(reason=UnresolvedReason.NO_SUBJECT)
    assert provider.calls == 0


def test_description_without_subject_is_unresolved(resolver, provider):
    outcome = resolver.resolve(LocationQuery(description="Massive earthquake reported"))
    assert isinstance(outcome, Unresolved)
    assert outcome.reason is UnresolvedReason.NO_SUBJECT
    assert provider.calls == 0


def test_explicit_location_name_skips_extraction(provider, cache):
    extractor = StaticExtractor("Somewhere else")
    chain = GeocodeProviderChain(providers=[provider], timeout_seconds=2.0)
    resolver = LocationResolver(chain=chain, cache=cache, extractor=extractor)
    try:
        outcome = resolver.resolve(
            LocationQuery(description="Flooding in Chicago", location_name="Manhattan")
        )
    finally:
        chain.close()

    assert isinstance(outcome, ResolvedLocation)
    assert extractor.calls == 0
    assert provider.queries == ["Manhattan"]


def test_primary_extractor_result_is_used(provider, cache):
    extractor = StaticExtractor("Manhattan, NY")
    chain = GeocodeProviderChain(providers=[provider], timeout_seconds=2.0)
    resolver = LocationResolver(chain=chain, cache=cache, extractor=extractor)
    try:
        resolver.resolve(LocationQuery(description="Flooding in Chicago"))
    finally:
        chain.close()

    assert provider.queries == ["Manhattan, NY"]


def test_failed_extractor_falls_back_to_keyword_heuristic(resolver, provider):
    outcome = resolver.resolve(
        LocationQuery(description="Heavy flooding in Manhattan, NYC")
    )

    assert isinstance(outcome, ResolvedLocation)
    assert outcome.source == "provider_1"
    assert provider.queries == ["Manhattan"]


def test_second_resolve_is_served_from_cache(resolver, provider):
    query = LocationQuery(location_name="Manhattan")
    first = resolver.resolve(query)
    second = resolver.resolve(query)

    assert provider.calls == 1
    assert first.source == "provider_1"
    assert second.source == "cache"
    assert (second.latitude, second.longitude, second.formatted_address) == (
        first.latitude,
        first.longitude,
        first.formatted_address,
    )


def test_equivalent_subjects_share_cache_entry(resolver, provider):
    resolver.resolve(LocationQuery(location_name="Manhattan"))
    outcome = resolver.resolve(LocationQuery(location_name="  MANHATTAN "))

    assert outcome.source == "cache"
    assert provider.calls == 1


def test_cache_entry_expires_after_ttl(resolver, provider, clock):
    query = LocationQuery(location_name="Manhattan")
    resolver.resolve(query)
    clock.advance(3599)
    assert resolver.resolve(query).source == "cache"

    clock.advance(1)
    outcome = resolver.resolve(query)

    assert outcome.source == "provider_1"
    assert provider.calls == 2


def test_failures_are_not_cached(cache):
    provider = StubGeocoder("stub")
    chain = GeocodeProviderChain(providers=[provider], timeout_seconds=2.0)
    resolver = LocationResolver(chain=chain, cache=cache)
    try:
        first = resolver.resolve(LocationQuery(location_name="Springfield"))
        second = resolver.resolve(LocationQuery(location_name="Springfield"))
    finally:
        chain.close()

    assert first == Unresolved(reason=UnresolvedReason.GEOCODE_FAILED, subject="Springfield")
    assert second == first
    assert provider.calls == 2
    assert cache.size() == 0


def test_fallback_table_results_are_cached(cache):
    provider = StubGeocoder("stub")
    chain = GeocodeProviderChain(providers=[provider], timeout_seconds=2.0)
    resolver = LocationResolver(chain=chain, cache=cache)
    try:
        first = resolver.resolve(LocationQuery(location_name="Houston"))
        second = resolver.resolve(LocationQuery(location_name="Houston"))
    finally:
        chain.close()

    assert first.source == "fallback_table"
    assert second.source == "cache"
    assert provider.calls == 1


def test_concurrent_misses_share_one_provider_call(cache):
    gate = threading.Event()
    provider = StubGeocoder("stub", hit=MANHATTAN_HIT, gate=gate)
    chain = GeocodeProviderChain(providers=[provider], timeout_seconds=5.0)
    resolver = LocationResolver(chain=chain, cache=cache)
    results: list[object] = []
    results_lock = threading.Lock()

    def worker():
        outcome = resolver.resolve(LocationQuery(location_name="Manhattan"))
        with results_lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    try:
        for t in threads:
            t.start()
        deadline = time.monotonic() + 2.0
        while provider.calls == 0 and time.monotonic() < deadline:
            time.sleep(0.01)
        # Give the followers time to join the in-flight lookup.
        time.sleep(0.2)
        gate.set()
        for t in threads:
            t.join(5.0)
    finally:
        gate.set()
        chain.close()

    assert provider.calls == 1
    assert len(results) == 8
    coordinates = {(r.latitude, r.longitude) for r in results}
    assert coordinates == {(MANHATTAN_HIT.latitude, MANHATTAN_HIT.longitude)}


class PausingCache(InMemoryCache):
    """Holds the first `get` made from thread `pause_in` until `resume` is set.

    The value is read before pausing, so the paused caller sees a miss
    taken while another caller's lookup was still running.
    """

    def __init__(self) -> None:
        super().__init__(name="pausing")
        self.pause_in: Optional[str] = None
        self.paused = threading.Event()
        self.resume = threading.Event()

    def get(self, key):
        value = super().get(key)
        if threading.current_thread().name == self.pause_in and not self.paused.is_set():
            self.paused.set()
            self.resume.wait(5.0)
        return value


def test_late_miss_after_leader_finished_reuses_cached_result():
    gate = threading.Event()
    provider = StubGeocoder("stub", hit=MANHATTAN_HIT, gate=gate)
    cache = PausingCache()
    cache.pause_in = "follower"
    chain = GeocodeProviderChain(providers=[provider], timeout_seconds=5.0)
    resolver = LocationResolver(chain=chain, cache=cache)
    results: dict[str, object] = {}

    def run(name):
        results[name] = resolver.resolve(LocationQuery(location_name="Manhattan"))

    leader = threading.Thread(target=run, args=("leader",), name="leader")
    follower = threading.Thread(target=run, args=("follower",), name="follower")
    try:
        leader.start()
        deadline = time.monotonic() + 2.0
        while provider.calls == 0 and time.monotonic() < deadline:
            time.sleep(0.01)

        follower.start()
        assert cache.paused.wait(2.0)

        gate.set()
        leader.join(5.0)
        cache.resume.set()
        follower.join(5.0)
    finally:
        gate.set()
        cache.resume.set()
        chain.close()

    assert provider.calls == 1
    assert results["leader"].source == "provider_1"
    assert results["follower"].source == "cache"
    assert (results["follower"].latitude, results["follower"].longitude) == (
        MANHATTAN_HIT.latitude,
        MANHATTAN_HIT.longitude,
    )


def test_broken_cache_is_treated_as_miss(provider):
    class BrokenCache(InMemoryCache):
        def get(self, key):
            raise ConnectionError("cache down")

        def set(self, key, value, ttl=None):
            raise ConnectionError("cache down")

    chain = GeocodeProviderChain(providers=[provider], timeout_seconds=2.0)
    resolver = LocationResolver(chain=chain, cache=BrokenCache(name="broken"))
    try:
        outcome = resolver.resolve(LocationQuery(location_name="Manhattan"))
    finally:
        chain.close()

    assert isinstance(outcome, ResolvedLocation)
    assert outcome.source == "provider_1"


def test_invalidate_forces_fresh_lookup(resolver, provider):
    query = LocationQuery(location_name="Manhattan")
    resolver.resolve(query)

    assert resolver.invalidate("manhattan") is True
    assert resolver.resolve(query).source == "provider_1"
    assert provider.calls == 2


def test_reverse_delegates_to_chain(resolver):
    assert resolver.reverse(41.88, -87.63) == "Chicago, IL"
