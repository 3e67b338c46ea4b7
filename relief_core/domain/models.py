"""Immutable domain models for the disaster coordination core.

All models are frozen dataclasses with slots. Records are never mutated
in place: every change produces a new instance via dataclasses.replace.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Union

SOURCE_CACHE = "cache"
SOURCE_FALLBACK_TABLE = "fallback_table"


def provider_source(position: int) -> str:
    """Source tag for the provider at 1-based `position` in the chain."""
    return f"provider_{position}"


def normalize_subject(subject: str) -> str:
    """Trim and case-fold a subject string."""
    return subject.strip().casefold()


class AuditAction(str, Enum):
    """Kinds of mutation recorded in an audit trail."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Role(str, Enum):
    """Actor roles relevant to record ownership checks."""

    ADMIN = "admin"
    CONTRIBUTOR = "contributor"


class UnresolvedReason(str, Enum):
    """Why resolution ended without coordinates."""

    NO_SUBJECT = "no_subject"
    GEOCODE_FAILED = "geocode_failed"


@dataclass(frozen=True, slots=True)
class GeoLocation:
    """GPS coordinates representing a geographic location."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )


@dataclass(frozen=True, slots=True)
class LocationQuery:
    """Input to location resolution.

    Attributes:
        description: Free-text description to extract a place from
        location_name: Explicit place name, used as-is when present
    """

    description: Optional[str] = None
    location_name: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        """True when neither field carries text."""
        return not (self.description and self.description.strip()) and not (
            self.location_name and self.location_name.strip()
        )


@dataclass(frozen=True, slots=True)
class GeocodeHit:
    """A single provider's answer for a subject string."""

    latitude: float
    longitude: float
    formatted_address: str


@dataclass(frozen=True, slots=True)
class ResolvedLocation:
    """Coordinates produced by the resolution pipeline.

    Attributes:
        latitude: Latitude in degrees
        longitude: Longitude in degrees
        formatted_address: Address string reported by the producer
        source: "cache", "provider_<i>" or "fallback_table"
    """

    latitude: float
    longitude: float
    formatted_address: str
    source: str

    def __post_init__(self) -> None:
        GeoLocation(self.latitude, self.longitude)

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "formatted_address": self.formatted_address,
            "source": self.source,
        }


@dataclass(frozen=True, slots=True)
class Unresolved:
    """Resolution finished without coordinates. Not an error."""

    reason: UnresolvedReason
    subject: Optional[str] = None


@dataclass(frozen=True, slots=True)
class GeocodeFailed:
    """Every provider and the fallback table failed for a subject.

    Attributes:
        subject: The subject string that was geocoded
        attempts: Names of the providers tried, in order
    """

    subject: str
    attempts: tuple[str, ...] = field(default_factory=tuple)


ResolutionOutcome = Union[ResolvedLocation, Unresolved]
GeocodeOutcome = Union[ResolvedLocation, GeocodeFailed]


@dataclass(frozen=True, slots=True)
class Actor:
    """The identity performing a mutation."""

    id: str
    role: Role = Role.CONTRIBUTOR

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True, slots=True)
class AuditEntry:
    """One immutable line of a record's change history."""

    action: AuditAction
    actor_id: str
    timestamp: datetime
    changes: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "actor_id": self.actor_id,
            "timestamp": self.timestamp.isoformat(),
            "changes": dict(self.changes),
        }


@dataclass(frozen=True, slots=True)
class DisasterInput:
    """Fields supplied when creating a disaster."""

    title: str
    description: Optional[str] = None
    location_name: Optional[str] = None
    tags: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class DisasterPatch:
    """Partial update; None means "leave unchanged"."""

    title: Optional[str] = None
    description: Optional[str] = None
    location_name: Optional[str] = None
    tags: Optional[tuple[str, ...]] = None

    def changes(self) -> dict[str, Any]:
        """Return only the fields that were set."""
        changed: dict[str, Any] = {}
        if self.title is not None:
            changed["title"] = self.title
        if self.description is not None:
            changed["description"] = self.description
        if self.location_name is not None:
            changed["location_name"] = self.location_name
        if self.tags is not None:
            changed["tags"] = list(self.tags)
        return changed


@dataclass(frozen=True, slots=True)
class DisasterRecord:
    """A disaster report with its location and audit history.

    Attributes:
        id: Unique record identifier
        title: Short title
        location_name: Place name, given or extracted
        description: Free-text description
        tags: Tag set used for filtering
        owner_id: Actor that created the record
        coordinates: Resolved location, None when unresolved
        audit_trail: Change history, oldest first
        created_at: Creation timestamp (UTC)
        updated_at: Last mutation timestamp (UTC)
        version: Store version, incremented on every write
    """

    id: str
    title: str
    location_name: Optional[str]
    description: Optional[str]
    tags: frozenset[str]
    owner_id: str
    created_at: datetime
    updated_at: datetime
    coordinates: Optional[ResolvedLocation] = None
    audit_trail: tuple[AuditEntry, ...] = field(default_factory=tuple)
    version: int = 0

    def is_modifiable_by(self, actor: Actor) -> bool:
        """Owners and admins may update or delete a record."""
        return actor.is_admin or actor.id == self.owner_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "location_name": self.location_name,
            "description": self.description,
            "tags": sorted(self.tags),
            "owner_id": self.owner_id,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
            "audit_trail": [entry.to_dict() for entry in self.audit_trail],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "version": self.version,
        }


@dataclass(frozen=True, slots=True)
class Event:
    """An ephemeral notification fanned out to observers."""

    type: str
    payload: Mapping[str, Any]
