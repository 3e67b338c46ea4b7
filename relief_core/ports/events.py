"""Event ports - Publishing mutations and reaching real-time clients."""

from __future__ import annotations

from typing import Any, Mapping, Protocol


class PublisherPort(Protocol):
    """Port injected into services to announce mutations.

    Implementations:
    - services/event_bus.py (EventBus)
    """

    def publish(self, event_type: str, payload: Mapping[str, Any]) -> None:
        """Queue an event for every currently connected observer.

        Must not block on observer delivery.
        """
        ...


class BroadcastTransportPort(Protocol):
    """A real-time transport that pushes to all its connected clients.

    Connection lifecycle and authentication belong to the transport.
    """

    def broadcast(self, event_name: str, payload: Mapping[str, Any]) -> None:
        ...
