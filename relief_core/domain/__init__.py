"""Domain layer - Core business models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    CacheUnavailableError,
    ConfigurationError,
    ExtractionError,
    NotFoundError,
    PermissionDeniedError,
    ProviderError,
    ReliefCoreError,
    VersionConflictError,
)
from .models import (
    SOURCE_CACHE,
    SOURCE_FALLBACK_TABLE,
    Actor,
    AuditAction,
    AuditEntry,
    DisasterInput,
    DisasterPatch,
    DisasterRecord,
    Event,
    GeocodeFailed,
    GeocodeHit,
    GeoLocation,
    LocationQuery,
    ResolvedLocation,
    Role,
    Unresolved,
    UnresolvedReason,
    normalize_subject,
    provider_source,
)

__all__ = [
    # Models
    "GeoLocation",
    "LocationQuery",
    "GeocodeHit",
    "ResolvedLocation",
    "Unresolved",
    "UnresolvedReason",
    "GeocodeFailed",
    "Actor",
    "Role",
    "AuditAction",
    "AuditEntry",
    "DisasterInput",
    "DisasterPatch",
    "DisasterRecord",
    "Event",
    "SOURCE_CACHE",
    "SOURCE_FALLBACK_TABLE",
    "normalize_subject",
    "provider_source",
    # Errors
    "ReliefCoreError",
    "ExtractionError",
    "ProviderError",
    "CacheUnavailableError",
    "PermissionDeniedError",
    "NotFoundError",
    "VersionConflictError",
    "ConfigurationError",
]
