"""Typed domain errors for the disaster coordination core.

Failures inside the location pipeline (extraction, providers, cache) are
raised by adapters and absorbed by the services that call them. Only
authorization, existence and write-conflict errors reach callers of
DisasterService.

All errors inherit from ReliefCoreError and can optionally wrap a root
cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ReliefCoreError(Exception):
    """Base error for the disaster coordination domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class ExtractionError(ReliefCoreError):
    """A location extractor failed or returned nothing.

    Attributes:
        extractor: Name of the extractor that failed
    """

    extractor: str = ""


@dataclass
class ProviderError(ReliefCoreError):
    """A single geocoding provider failed.

    Attributes:
        provider: Name of the provider
        query: The subject string that was sent
        timed_out: Whether the failure was a timeout
    """

    provider: str = ""
    query: str = ""
    timed_out: bool = False


@dataclass
class CacheUnavailableError(ReliefCoreError):
    """The cache backend could not serve a request.

    Attributes:
        key: Cache key involved in the failed operation
    """

    key: str = ""


@dataclass
class PermissionDeniedError(ReliefCoreError):
    """The actor may not modify the record.

    Attributes:
        actor_id: The actor that attempted the mutation
        disaster_id: The targeted record
    """

    actor_id: str = ""
    disaster_id: str = ""


@dataclass
class NotFoundError(ReliefCoreError):
    """The targeted record does not exist.

    Attributes:
        disaster_id: The id that was looked up
    """

    disaster_id: str = ""


@dataclass
class VersionConflictError(ReliefCoreError):
    """A write lost an optimistic concurrency check.

    Attributes:
        disaster_id: The record being written
        expected_version: Version the writer read
        actual_version: Version found in the store
    """

    disaster_id: str = ""
    expected_version: int = 0
    actual_version: Optional[int] = None


@dataclass
class ConfigurationError(ReliefCoreError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
    """

    setting_name: str = ""
