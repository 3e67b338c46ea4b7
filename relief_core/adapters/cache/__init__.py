"""Cache adapters - Implementations of the CachePort.

Available implementations:
- InMemoryCache: Thread-safe in-memory cache with TTL
- NullCache: No-op cache (always misses)
- CacheSweeper: Background expiry sweep for any CachePort
"""

from .memory_cache import InMemoryCache
from .null_cache import NullCache
from .sweeper import CacheSweeper

__all__ = ["InMemoryCache", "NullCache", "CacheSweeper"]
