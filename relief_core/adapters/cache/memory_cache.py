"""Thread-safe in-memory cache with per-entry expiry.

Backs location extraction and geocoding results:
- Thread-safe with RLock
- Per-entry TTL with a configurable default
- Lazy expiry on read plus an explicit sweep for the background sweeper
- Last-write-wins on set
- Statistics tracking
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass
class InMemoryCache(Generic[T]):
    """Thread-safe in-memory cache with TTL.

    This cache implements the CachePort protocol and can be injected
    into services and adapters that need caching functionality.

    Attributes:
        default_ttl_seconds: Default time-to-live for entries (None = no expiry)
        max_size: Maximum number of entries (None = unlimited)
        name: Cache name for logging
        clock: Source of the current time in seconds

    Example:
        cache = InMemoryCache[ResolvedLocation](name="geocode", default_ttl_seconds=3600)
        cache.set("geocode:manhattan", location)
    """

    default_ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    name: str = "cache"
    clock: Callable[[], float] = field(default=time.time, repr=False)

    _store: Dict[str, Tuple[Any, float]] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    # Statistics
    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"cache.{self.name}")

    def get(self, key: str) -> Optional[T]:
        """Get a value from the cache.

        An expired entry is removed as a side effect.

        Args:
            key: The cache key.

        Returns:
            The cached value, or None if not found or expired.
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None

            value, expires_at = entry
            if self.clock() >= expires_at:
                del self._store[key]
                self._logger.debug("Cache entry expired", extra={"key": key})
                self._misses += 1
                return None

            self._hits += 1
            return value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Set a value in the cache, overwriting any existing entry.

        Args:
            key: The cache key.
            value: The value to cache.
            ttl: Optional TTL override for this entry.
        """
        with self._lock:
            # Simple FIFO eviction once full
            if self.max_size is not None and len(self._store) >= self.max_size:
                if key not in self._store:
                    oldest_key = next(iter(self._store))
                    del self._store[oldest_key]
                    self._logger.debug(
                        "Cache evicted entry",
                        extra={"key": oldest_key, "reason": "max_size"},
                    )

            effective_ttl = ttl if ttl is not None else self.default_ttl_seconds
            if effective_ttl is not None:
                expires_at = self.clock() + effective_ttl
            else:
                expires_at = float("inf")

            self._store[key] = (value, expires_at)
            self._logger.debug(
                "Cache entry set",
                extra={"key": key, "ttl": effective_ttl},
            )

    def delete(self, key: str) -> bool:
        """Remove a specific cache entry.

        Args:
            key: The cache key to remove.

        Returns:
            True if the key existed and was removed.
        """
        with self._lock:
            if key in self._store:
                del self._store[key]
                self._logger.debug("Cache entry deleted", extra={"key": key})
                return True
            return False

    def sweep(self) -> int:
        """Remove all entries whose expiry has passed.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            now = self.clock()
            expired = [key for key, (_, expires_at) in self._store.items() if now >= expires_at]
            for key in expired:
                del self._store[key]
        if expired:
            self._logger.info("Cache sweep", extra={"entries_removed": len(expired)})
        return len(expired)

    def clear(self) -> int:
        """Clear all entries from the cache.

        Returns:
            Number of entries that were cleared.
        """
        with self._lock:
            count = len(self._store)
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._logger.info("Cache cleared", extra={"entries_cleared": count})
            return count

    def size(self) -> int:
        """Return the number of entries physically stored.

        Expired entries not yet read or swept are included.
        """
        with self._lock:
            return len(self._store)

    def stats(self) -> Dict[str, Any]:
        """Return cache statistics.

        Returns:
            Dictionary with hit/miss counts and size.
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 1),
            }

    def keys(self) -> list[str]:
        """Return all keys in the cache."""
        with self._lock:
            return list(self._store.keys())
