"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the application core and external
adapters. They enable dependency injection and make the system testable.

This module follows the Hexagonal Architecture pattern:
- Input ports: How the application is driven (services)
- Output ports: How the application drives external systems (adapters)
"""

from .cache import CachePort
from .events import BroadcastTransportPort, PublisherPort
from .geocoding import GeocoderPort
from .nlp import LocationExtractorPort
from .repository import DisasterRepositoryPort

__all__ = [
    # NLP
    "LocationExtractorPort",
    # Geocoding
    "GeocoderPort",
    # Cache
    "CachePort",
    # Storage
    "DisasterRepositoryPort",
    # Events
    "PublisherPort",
    "BroadcastTransportPort",
]
