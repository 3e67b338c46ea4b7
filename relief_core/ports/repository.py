"""Record store port - Durable storage of disaster records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import DisasterRecord


class DisasterRepositoryPort(Protocol):
    """Port for the disaster record store.

    Implementations:
    - adapters/storage/memory_repository.py (InMemoryDisasterRepository)

    Writes are guarded by an optimistic version check so that two
    concurrent read-modify-write cycles on the same record cannot
    silently drop one another's audit entries.
    """

    def get(self, disaster_id: str) -> Optional[DisasterRecord]:
        """Return the stored record, or None if absent."""
        ...

    def put(self, record: DisasterRecord, expected_version: int) -> DisasterRecord:
        """Store a record if the stored version still equals `expected_version`.

        Use expected_version=0 for a record that must not exist yet.

        Returns:
            The stored record, with its version incremented.

        Raises:
            VersionConflictError: If the stored version differs.
        """
        ...

    def delete(self, disaster_id: str) -> bool:
        """Remove a record. Returns True if it existed."""
        ...

    def list(
        self,
        tag: Optional[str] = None,
        owner_id: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Sequence[DisasterRecord]:
        """Return records newest first, optionally filtered."""
        ...
