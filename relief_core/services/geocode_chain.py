"""Ordered fallback across geocoding providers.

Providers are tried in fixed priority order, each under its own timeout.
Any failure (timeout, provider error, empty result) moves on to the next
provider; the static fallback table is the last resort. The chain never
raises for a failed lookup: it returns GeocodeFailed instead.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, Sequence, TypeVar

from ..adapters.geocoding.static_table import StaticFallbackTable
from ..domain.errors import ProviderError
from ..domain.models import (
    GeocodeFailed,
    GeocodeOutcome,
    ResolvedLocation,
    normalize_subject,
    provider_source,
)
from ..ports.geocoding import GeocoderPort

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """A named, zero-argument call that may produce a value."""

    name: str
    call: Callable[[], Optional[T]]


@dataclass(frozen=True)
class FirstSuccess(Generic[T]):
    """Outcome of `first_success`.

    Attributes:
        value: The first non-None value, or None if every attempt failed
        position: 1-based position of the attempt that produced it
        attempted: Names of the attempts made, in order
    """

    value: Optional[T]
    position: Optional[int]
    attempted: tuple[str, ...]


def first_success(
    attempts: Sequence[Attempt[T]],
    executor: Executor,
    timeout_seconds: float,
) -> FirstSuccess[T]:
    """Run attempts in order and stop at the first non-None value.

    Each attempt runs on `executor` and is abandoned after
    `timeout_seconds`. Timeouts, exceptions and None results all count
    as failures and are logged, never raised.
    """
    attempted: list[str] = []
    for position, attempt in enumerate(attempts, start=1):
        attempted.append(attempt.name)
        future = executor.submit(attempt.call)
        try:
            value = future.result(timeout=timeout_seconds)
        except FutureTimeoutError:
            future.cancel()
            logger.warning(
                "Provider timed out",
                extra={"provider": attempt.name, "timeout": timeout_seconds},
            )
            continue
        except ProviderError as e:
            logger.warning(
                "Provider failed",
                extra={"provider": attempt.name, "error": str(e)},
            )
            continue
        except Exception as e:
            logger.error(
                "Provider raised unexpected error",
                extra={"provider": attempt.name, "error": str(e)},
            )
            continue

        if value is None:
            logger.debug("Provider returned no result", extra={"provider": attempt.name})
            continue

        return FirstSuccess(value=value, position=position, attempted=tuple(attempted))

    return FirstSuccess(value=None, position=None, attempted=tuple(attempted))


@dataclass
class GeocodeProviderChain:
    """Geocode through an ordered list of providers plus a static table.

    Attributes:
        providers: Geocoders in priority order
        fallback_table: Last-resort city table
        timeout_seconds: Per-provider time bound
        max_workers: Size of the worker pool that runs provider calls
    """

    providers: Sequence[GeocoderPort]
    fallback_table: StaticFallbackTable = field(default_factory=StaticFallbackTable)
    timeout_seconds: float = 5.0
    max_workers: int = 8

    _executor: Optional[ThreadPoolExecutor] = field(default=None, repr=False)
    _executor_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="geocode"
                )
            return self._executor

    def geocode(self, subject: str) -> GeocodeOutcome:
        """Resolve `subject` to coordinates.

        Returns:
            ResolvedLocation tagged with the producing source, or
            GeocodeFailed when nothing matched.
        """
        attempts = [
            Attempt(name=_provider_name(p), call=_bind_geocode(p, subject))
            for p in self.providers
        ]
        outcome = first_success(attempts, self._get_executor(), self.timeout_seconds)

        if outcome.value is not None and outcome.position is not None:
            hit = outcome.value
            return ResolvedLocation(
                latitude=hit.latitude,
                longitude=hit.longitude,
                formatted_address=hit.formatted_address,
                source=provider_source(outcome.position),
            )

        fallback = self.fallback_table.lookup(subject)
        if fallback is not None:
            self._logger.info(
                "Using fallback coordinates",
                extra={"subject": subject, "attempted": list(outcome.attempted)},
            )
            return fallback

        self._logger.warning(
            "Geocoding failed on every provider",
            extra={"subject": normalize_subject(subject), "attempted": list(outcome.attempted)},
        )
        return GeocodeFailed(subject=subject, attempts=outcome.attempted)

    def reverse(self, latitude: float, longitude: float) -> str:
        """Describe coordinates as a place label.

        Providers first, then the nearest fallback-table city, then the
        raw coordinates formatted to four decimals.
        """
        attempts = [
            Attempt(
                name=_provider_name(p),
                call=_bind_reverse(p, latitude, longitude),
            )
            for p in self.providers
        ]
        outcome = first_success(attempts, self._get_executor(), self.timeout_seconds)
        if outcome.value:
            return outcome.value

        label = self.fallback_table.nearest(latitude, longitude)
        if label is not None:
            return label
        return f"{latitude:.4f}, {longitude:.4f}"

    def close(self) -> None:
        """Shut down the worker pool without waiting for stuck calls."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None


def _provider_name(provider: GeocoderPort) -> str:
    return getattr(provider, "name", type(provider).__name__)


def _bind_geocode(provider: GeocoderPort, subject: str) -> Callable[[], object]:
    return lambda: provider.geocode(subject)


def _bind_reverse(
    provider: GeocoderPort, latitude: float, longitude: float
) -> Callable[[], object]:
    return lambda: provider.reverse_geocode(latitude, longitude)
