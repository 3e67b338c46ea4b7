"""Disaster service - create, update and delete disaster records.

This service ties the pieces together for each mutation:
1. Ownership and existence checks (update/delete)
2. Location resolution (never fatal; only decides `coordinates`)
3. Audit trail append
4. Versioned write to the record store
5. Event publication to connected observers
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Optional, Sequence

from ..domain.errors import NotFoundError, PermissionDeniedError, VersionConflictError
from ..domain.models import (
    Actor,
    AuditAction,
    DisasterInput,
    DisasterPatch,
    DisasterRecord,
    LocationQuery,
    ResolutionOutcome,
    ResolvedLocation,
)
from ..ports.events import PublisherPort
from ..ports.repository import DisasterRepositoryPort
from .audit_ledger import AuditLedger
from .location_resolver import LocationResolver

ACTION_CREATED = "created"
ACTION_UPDATED = "updated"
ACTION_DELETED = "deleted"


def new_disaster_id() -> str:
    return str(uuid.uuid4())


@dataclass
class DisasterService:
    """Main service for disaster record mutations.

    Attributes:
        resolver: Location resolution pipeline
        repository: Durable record store
        ledger: Audit trail writer
        publisher: Event publisher for real-time observers
        event_name: Event type emitted on every mutation
        max_update_retries: Attempts before a version conflict is surfaced
        id_factory: Generates ids for new records
    """

    resolver: LocationResolver
    repository: DisasterRepositoryPort
    ledger: AuditLedger
    publisher: PublisherPort
    event_name: str = "disaster_updated"
    max_update_retries: int = 3
    id_factory: Callable[[], str] = field(default=new_disaster_id, repr=False)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def resolve_location(self, query: LocationQuery) -> ResolutionOutcome:
        """Resolve a location query without touching any record."""
        return self.resolver.resolve(query)

    def create_disaster(self, data: DisasterInput, actor: Actor) -> DisasterRecord:
        """Create a record. Always succeeds; coordinates may be absent.

        If no location name is given, one is extracted from the
        description and stored on the record.
        """
        location_name = data.location_name
        coordinates: Optional[ResolvedLocation] = None

        query = LocationQuery(description=data.description, location_name=location_name)
        if not query.is_empty:
            subject = self.resolver.subject_for(query)
            if subject is not None:
                location_name = subject
                coordinates = self._coordinates_for(subject)

        now = self.ledger.clock()
        record = DisasterRecord(
            id=self.id_factory(),
            title=data.title,
            location_name=location_name,
            description=data.description,
            tags=frozenset(data.tags),
            owner_id=actor.id,
            created_at=now,
            updated_at=now,
            coordinates=coordinates,
        )
        record = self.ledger.append(
            record,
            AuditAction.CREATE,
            actor.id,
            {
                "title": data.title,
                "location_name": location_name,
                "description": data.description,
                "tags": list(data.tags),
            },
        )
        stored = self.repository.put(record, expected_version=0)

        self._logger.info(
            "Disaster created",
            extra={
                "disaster_id": stored.id,
                "title": stored.title,
                "owner_id": actor.id,
                "has_coordinates": stored.coordinates is not None,
            },
        )
        self._emit({"action": ACTION_CREATED, "disaster": stored.to_dict()})
        return stored

    def update_disaster(
        self, disaster_id: str, patch: DisasterPatch, actor: Actor
    ) -> DisasterRecord:
        """Apply a partial update.

        A new `location_name` is re-resolved; failure clears the
        coordinates. The read-check-write cycle is retried when another
        writer updated the record in between.

        Raises:
            NotFoundError: If the record does not exist.
            PermissionDeniedError: If the actor is neither owner nor admin.
            VersionConflictError: If every retry lost the version check.
        """
        self._load_modifiable(disaster_id, actor)

        # A blank location name means "leave the location unchanged".
        if patch.location_name is not None and not patch.location_name.strip():
            patch = replace(patch, location_name=None)

        relocate = patch.location_name is not None
        coordinates: Optional[ResolvedLocation] = None
        if relocate:
            coordinates = self._coordinates_for(patch.location_name)  # type: ignore[arg-type]

        changes = patch.changes()
        max_attempts = max(1, self.max_update_retries)
        attempt = 0
        while True:
            attempt += 1
            current = self._load_modifiable(disaster_id, actor)
            updated = self._apply_patch(current, patch)
            if relocate:
                updated = replace(updated, coordinates=coordinates)
            updated = self.ledger.append(updated, AuditAction.UPDATE, actor.id, changes)

            try:
                stored = self.repository.put(updated, expected_version=current.version)
            except VersionConflictError:
                if attempt >= max_attempts:
                    self._logger.error(
                        "Update abandoned after repeated conflicts",
                        extra={"disaster_id": disaster_id, "attempts": attempt},
                    )
                    raise
                self._logger.warning(
                    "Concurrent update detected, retrying",
                    extra={"disaster_id": disaster_id, "attempt": attempt},
                )
                continue

            self._logger.info(
                "Disaster updated",
                extra={"disaster_id": disaster_id, "actor_id": actor.id},
            )
            self._emit({"action": ACTION_UPDATED, "disaster": stored.to_dict()})
            return stored

    def delete_disaster(self, disaster_id: str, actor: Actor) -> None:
        """Remove a record.

        Raises:
            NotFoundError: If the record does not exist.
            PermissionDeniedError: If the actor is neither owner nor admin.
        """
        current = self._load_modifiable(disaster_id, actor)
        if not self.repository.delete(disaster_id):
            raise NotFoundError("Disaster not found", disaster_id=disaster_id)

        self._logger.info(
            "Disaster deleted",
            extra={"disaster_id": disaster_id, "title": current.title, "actor_id": actor.id},
        )
        self._emit({"action": ACTION_DELETED, "disaster_id": disaster_id})

    def get_disaster(self, disaster_id: str) -> DisasterRecord:
        """Fetch a record.

        Raises:
            NotFoundError: If the record does not exist.
        """
        record = self.repository.get(disaster_id)
        if record is None:
            raise NotFoundError("Disaster not found", disaster_id=disaster_id)
        return record

    def list_disasters(
        self,
        tag: Optional[str] = None,
        owner_id: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Sequence[DisasterRecord]:
        """List records newest first, optionally filtered by tag or owner."""
        return self.repository.list(tag=tag, owner_id=owner_id, limit=limit, offset=offset)

    def _load_modifiable(self, disaster_id: str, actor: Actor) -> DisasterRecord:
        record = self.repository.get(disaster_id)
        if record is None:
            raise NotFoundError("Disaster not found", disaster_id=disaster_id)
        if not record.is_modifiable_by(actor):
            self._logger.warning(
                "Permission denied",
                extra={"disaster_id": disaster_id, "actor_id": actor.id},
            )
            raise PermissionDeniedError(
                "Insufficient permissions",
                actor_id=actor.id,
                disaster_id=disaster_id,
            )
        return record

    def _apply_patch(self, record: DisasterRecord, patch: DisasterPatch) -> DisasterRecord:
        fields: dict[str, Any] = {"updated_at": self.ledger.clock()}
        if patch.title is not None:
            fields["title"] = patch.title
        if patch.description is not None:
            fields["description"] = patch.description
        if patch.location_name is not None:
            fields["location_name"] = patch.location_name
        if patch.tags is not None:
            fields["tags"] = frozenset(patch.tags)
        return replace(record, **fields)

    def _coordinates_for(self, subject: str) -> Optional[ResolvedLocation]:
        outcome = self.resolver.resolve(LocationQuery(location_name=subject))
        if isinstance(outcome, ResolvedLocation):
            return outcome
        self._logger.warning(
            "Location could not be geocoded",
            extra={"subject": subject, "reason": outcome.reason.value},
        )
        return None

    def _emit(self, payload: Mapping[str, Any]) -> None:
        # The mutation is already durable; a publisher failure must not undo it.
        try:
            self.publisher.publish(self.event_name, payload)
        except Exception as e:
            self._logger.error(
                "Event publication failed",
                extra={"event_type": self.event_name, "error": str(e)},
            )
