"""Services layer - Application orchestration.

This module contains the services that implement the disaster
coordination use cases on top of the ports.

Available services:
- DisasterService: create/update/delete/list disaster records
- LocationResolver: extraction, caching and single-flight geocoding
- GeocodeProviderChain: ordered provider fallback
- AuditLedger: append-only change history
- EventBus: ordered, non-blocking fan-out to observers
"""

from .audit_ledger import AuditLedger
from .disaster_service import DisasterService
from .event_bus import EventBus, Subscription
from .geocode_chain import GeocodeProviderChain, first_success
from .location_resolver import LocationResolver

__all__ = [
    "DisasterService",
    "LocationResolver",
    "GeocodeProviderChain",
    "first_success",
    "AuditLedger",
    "EventBus",
    "Subscription",
]
