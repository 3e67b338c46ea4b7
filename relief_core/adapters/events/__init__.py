"""Event adapters - connect the EventBus to real-time transports."""

from .transport_observer import TransportObserver

__all__ = ["TransportObserver"]
