"""Null cache implementation.

This cache always misses. Inject it to run resolution uncached, or in
tests that must not depend on state cached by a previous call.

Example:
    resolver = LocationResolver(chain=chain, cache=NullCache(), ...)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class NullCache(Generic[T]):
    """No-op cache - always misses."""

    name: str = "null"

    def get(self, key: str) -> Optional[T]:
        return None

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        pass

    def delete(self, key: str) -> bool:
        return False

    def sweep(self) -> int:
        return 0

    def clear(self) -> int:
        return 0

    def size(self) -> int:
        return 0

    def stats(self) -> Dict[str, int]:
        return {
            "size": 0,
            "hits": 0,
            "misses": 0,
            "hit_rate_percent": 0,
        }
