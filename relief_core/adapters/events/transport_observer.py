"""Bridge from the event bus to a real-time transport."""

from __future__ import annotations

from dataclasses import dataclass

from ...domain.models import Event
from ...ports.events import BroadcastTransportPort


@dataclass
class TransportObserver:
    """Observer that forwards each event to `transport.broadcast`.

    Subscribe one of these to the EventBus per transport, e.g. a
    Socket.IO server whose `emit` is wrapped as `broadcast`.
    """

    transport: BroadcastTransportPort

    def __call__(self, event: Event) -> None:
        self.transport.broadcast(event.type, dict(event.payload))
