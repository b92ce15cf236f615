"""Caching utilities for solchat.

This module provides:
- TTL-based price caching with age tracking
- Stale entries retained as fallback when a refresh fails
- A small cachetools wrapper for short-lived API payloads
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CacheStatus(str, Enum):
    """Status of a cache lookup."""

    HIT_FRESH = "hit_fresh"  # Cache hit within TTL
    HIT_STALE = "hit_stale"  # Cache hit but past TTL (usable as fallback)
    MISS = "miss"


@dataclass
class CacheEntry:
    """A cached value with the time it was fetched."""

    value: Any
    fetched_at: float
    ttl: float
    source: str = "unknown"

    def age_seconds(self, now: float) -> float:
        return now - self.fetched_at

    def is_expired(self, now: float) -> bool:
        return self.age_seconds(now) >= self.ttl


@dataclass
class CacheResult:
    """Result of a cache lookup with metadata."""

    value: Any
    status: CacheStatus
    age_seconds: Optional[float] = None
    source: str = "cache"

    @property
    def is_fresh(self) -> bool:
        return self.status == CacheStatus.HIT_FRESH

    @property
    def is_stale(self) -> bool:
        return self.status == CacheStatus.HIT_STALE

    @property
    def is_miss(self) -> bool:
        return self.status == CacheStatus.MISS


class PriceCache:
    """Per-symbol price cache with a fixed freshness window.

    Entries are only replaced on a successful fetch; an expired entry stays
    in place so callers can still read it as stale.
    """

    def __init__(self, ttl: float = 60, clock: Optional[Clock] = None):
        """Initialize the cache.

        Args:
            ttl: Freshness window in seconds (default 60)
            clock: Monotonic time source, injectable for tests
        """
        self.ttl = ttl
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}

    def lookup(self, key: str) -> CacheResult:
        """Look up a key, reporting freshness."""
        entry = self._entries.get(key)
        if entry is None:
            return CacheResult(value=None, status=CacheStatus.MISS)
        now = self._clock()
        status = CacheStatus.HIT_STALE if entry.is_expired(now) else CacheStatus.HIT_FRESH
        return CacheResult(
            value=entry.value,
            status=status,
            age_seconds=entry.age_seconds(now),
            source=entry.source,
        )

    def get(self, key: str) -> Optional[Any]:
        """Get a fresh value, or None if missing or expired."""
        result = self.lookup(key)
        return result.value if result.is_fresh else None

    def set(self, key: str, value: Any, source: str = "unknown") -> None:
        self._entries[key] = CacheEntry(
            value=value, fetched_at=self._clock(), ttl=self.ttl, source=source
        )

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class Cache:
    """Simple TTL cache wrapper for API responses."""

    def __init__(self, maxsize: int = 100, ttl: int = 300):
        """Initialize the cache.

        Args:
            maxsize: Maximum number of items to cache
            ttl: Time-to-live in seconds (default 5 minutes)
        """
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)

    def get(self, key: str) -> Optional[Any]:
        """Get a value from cache, None if not found or expired."""
        return self._cache.get(key)

    def set(self, key: str, value: Any) -> None:
        self._cache[key] = value

    def clear(self) -> None:
        self._cache.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._cache
