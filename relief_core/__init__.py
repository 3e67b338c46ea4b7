"""Top-level package for the disaster coordination core.

This package resolves disaster locations through a chain of fallible
geocoding providers behind an expiring cache, keeps an append-only audit
trail on every disaster record, and broadcasts each mutation to
connected real-time observers.

Entry point: `Container.create_default()` wires every service handle;
`DisasterService` exposes the create/update/delete operations.
"""
