"""Storage adapters - Implementations of DisasterRepositoryPort."""

from .memory_repository import InMemoryDisasterRepository

__all__ = ["InMemoryDisasterRepository"]
