"""Thread-safe in-memory disaster record store with optimistic versioning."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Sequence

from ...domain.errors import VersionConflictError
from ...domain.models import DisasterRecord


@dataclass
class InMemoryDisasterRepository:
    """DisasterRepositoryPort backed by a dict.

    `put` is a compare-and-swap on the record version: the write only
    lands if the stored version still equals the one the writer read.
    """

    _records: Dict[str, DisasterRecord] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def get(self, disaster_id: str) -> Optional[DisasterRecord]:
        with self._lock:
            return self._records.get(disaster_id)

    def put(self, record: DisasterRecord, expected_version: int) -> DisasterRecord:
        with self._lock:
            current = self._records.get(record.id)
            actual = current.version if current is not None else 0
            if actual != expected_version:
                raise VersionConflictError(
                    f"Version conflict on disaster {record.id}",
                    disaster_id=record.id,
                    expected_version=expected_version,
                    actual_version=actual,
                )
            stored = replace(record, version=actual + 1)
            self._records[record.id] = stored
            self._logger.debug(
                "Disaster stored",
                extra={"disaster_id": record.id, "version": stored.version},
            )
            return stored

    def delete(self, disaster_id: str) -> bool:
        with self._lock:
            return self._records.pop(disaster_id, None) is not None

    def list(
        self,
        tag: Optional[str] = None,
        owner_id: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Sequence[DisasterRecord]:
        with self._lock:
            records = list(self._records.values())
        if tag is not None:
            records = [r for r in records if tag in r.tags]
        if owner_id is not None:
            records = [r for r in records if r.owner_id == owner_id]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[offset : offset + limit]
