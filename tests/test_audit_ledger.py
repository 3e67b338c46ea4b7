"""Tests for AuditLedger."""

from __future__ import annotations

from datetime import datetime, timezone

from relief_core.domain.models import AuditAction, DisasterRecord
from relief_core.services import AuditLedger

T0 = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_record() -> DisasterRecord:
    return DisasterRecord(
        id="d1",
        title="NYC Flood",
        location_name="Manhattan",
        description=None,
        tags=frozenset(),
        owner_id="netrunnerX",
        created_at=T0,
        updated_at=T0,
    )


def test_append_returns_new_record_with_entry_at_end():
    ledger = AuditLedger(clock=lambda: T0)
    record = make_record()

    first = ledger.append(record, AuditAction.CREATE, "netrunnerX", {"title": "NYC Flood"})
    second = ledger.append(first, AuditAction.UPDATE, "reliefAdmin", {"title": "NYC Flood 2"})

    assert record.audit_trail == ()
    assert [e.action for e in second.audit_trail] == [AuditAction.CREATE, AuditAction.UPDATE]
    assert second.audit_trail[-1].actor_id == "reliefAdmin"
    assert second.audit_trail[-1].timestamp == T0


def test_changes_are_copied():
    ledger = AuditLedger(clock=lambda: T0)
    changes = {"title": "before"}
    record = ledger.append(make_record(), AuditAction.UPDATE, "netrunnerX", changes)
    changes["title"] = "after"

    assert record.audit_trail[0].changes == {"title": "before"}


def test_entry_serializes_to_dict():
    entry = AuditLedger(clock=lambda: T0).entry(AuditAction.DELETE, "netrunnerX", {})

    assert entry.to_dict() == {
        "action": "delete",
        "actor_id": "netrunnerX",
        "timestamp": "2024-06-01T12:00:00+00:00",
        "changes": {},
    }
