"""
In-memory TTL cache for market-data series.

The dashboard chart polls the same currency pair for every visitor; the
provider's series only changes every five minutes and its free tier is
rate-limited, so responses are kept for ``CACHE_TTL`` seconds.

Entries are evicted oldest-first once ``max_size`` is reached. The event loop
is single-threaded, so plain dict operations need no locking.
"""

import logging
import time
from typing import Any, Dict, Optional

from yieldbook.core.config import settings

logger = logging.getLogger(__name__)


class CacheEntry:
    """A single cached value with creation timestamp."""

    __slots__ = ("value", "created_at")

    def __init__(self, value: Any):
        self.value = value
        self.created_at = time.monotonic()

    def is_expired(self, ttl: float) -> bool:
        return (time.monotonic() - self.created_at) > ttl


class TTLCache:
    """
    Dict-backed cache with per-entry TTL and FIFO eviction.

    Parameters
    ----------
    ttl : float
        Time-to-live in seconds for each entry.
    max_size : int
        Maximum number of entries before the oldest is evicted.
    enabled : bool
        When False, ``get`` always misses and ``set`` is a no-op.
    """

    def __init__(self, ttl: float = 300.0, max_size: int = 256, enabled: bool = True):
        self._store: Dict[str, CacheEntry] = {}
        self._ttl = ttl
        self._max_size = max_size
        self._enabled = enabled
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or ``None`` on miss / expiry."""
        if not self._enabled:
            return None

        entry = self._store.get(key)
        if entry is None:
            self._misses += 1
            return None

        if entry.is_expired(self._ttl):
            del self._store[key]
            self._misses += 1
            logger.debug("Cache EXPIRED: %s", key)
            return None

        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any) -> None:
        if not self._enabled:
            return

        if len(self._store) >= self._max_size and key not in self._store:
            oldest_key = next(iter(self._store))
            del self._store[oldest_key]
            logger.debug("Cache EVICTED (max_size): %s", oldest_key)

        self._store[key] = CacheEntry(value)

    def clear(self) -> None:
        self._store.clear()

    def get_stats(self) -> dict:
        """Return cache statistics for the health-check endpoint."""
        total = self._hits + self._misses
        return {
            "enabled": self._enabled,
            "size": len(self._store),
            "max_size": self._max_size,
            "ttl_seconds": self._ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": f"{(self._hits / total * 100):.1f}%" if total > 0 else "N/A",
        }


market_data_cache = TTLCache(
    ttl=settings.CACHE_TTL,
    max_size=settings.CACHE_MAX_SIZE,
    enabled=settings.CACHE_ENABLED,
)
