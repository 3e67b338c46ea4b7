"""Append-only change history for disaster records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from ..domain.models import AuditAction, AuditEntry, DisasterRecord


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AuditLedger:
    """Append audit entries to records.

    The ledger only appends. Whether the actor is allowed to make the
    change is decided before it is called.

    Attributes:
        clock: Source of entry timestamps
    """

    clock: Callable[[], datetime] = field(default=utc_now, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def entry(
        self, action: AuditAction, actor_id: str, changes: Mapping[str, Any]
    ) -> AuditEntry:
        return AuditEntry(
            action=action,
            actor_id=actor_id,
            timestamp=self.clock(),
            changes=dict(changes),
        )

    def append(
        self,
        record: DisasterRecord,
        action: AuditAction,
        actor_id: str,
        changes: Mapping[str, Any],
    ) -> DisasterRecord:
        """Return `record` with one new entry at the end of its trail."""
        new_entry = self.entry(action, actor_id, changes)
        self._logger.debug(
            "Audit entry appended",
            extra={
                "disaster_id": record.id,
                "action": action.value,
                "actor_id": actor_id,
                "trail_length": len(record.audit_trail) + 1,
            },
        )
        return replace(record, audit_trail=record.audit_trail + (new_entry,))
