"""Cache port - Injectable caching abstraction.

This protocol defines the contract for the expiring key-value cache that
sits in front of location extraction and geocoding, so that repeated
lookups of the same place do not hit upstream services.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, TypeVar

T = TypeVar("T")


class CachePort(Protocol[T]):
    """Port for caching.

    Implementations:
    - adapters/cache/memory_cache.py (InMemoryCache) - Production
    - adapters/cache/null_cache.py (NullCache) - Testing

    An entry is logically absent once its expiry has passed, even if the
    backend still holds it.
    """

    def get(self, key: str) -> Optional[T]:
        """Get a value from the cache.

        Args:
            key: The cache key.

        Returns:
            The cached value, or None if not found or expired.
        """
        ...

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Set a value in the cache, replacing any existing entry.

        Args:
            key: The cache key.
            value: The value to cache.
            ttl: Optional TTL override in seconds.
        """
        ...

    def delete(self, key: str) -> bool:
        """Remove a specific cache entry.

        Args:
            key: The cache key to remove.

        Returns:
            True if the key existed and was removed, False otherwise.
        """
        ...

    def sweep(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed.
        """
        ...

    def clear(self) -> int:
        """Clear all entries from the cache.

        Returns:
            Number of entries that were cleared.
        """
        ...

    def size(self) -> int:
        """Return the number of entries physically stored."""
        ...

    def stats(self) -> Dict[str, Any]:
        """Return hit/miss statistics."""
        ...
