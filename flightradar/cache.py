"""
In-memory snapshot cache for upstream flight queries.

Stores the filtered flight list for each distinct OpenSky query so that
repeated requests for the same area inside the TTL never reach the
upstream API.

Design rationale:
OpenSky bills every /states/all call against a daily credit budget, while
several clients may poll the same bounding box at once. The cache key is
the rounded query string, so two requests whose boxes round to the same
tenth of a degree share one entry.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

from flightradar.config import config

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Cached value plus the clock reading at capture time."""
    value: T
    captured_at: float

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return now - self.captured_at < ttl_seconds


class SnapshotCache(Generic[T]):
    """
    Thread-safe TTL cache keyed by query string.

    Entries older than the TTL are treated as absent and dropped on read.
    Inserting under an existing key replaces the entry wholesale.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else config.cache.ttl_seconds
        self.max_entries = max_entries or config.cache.max_entries
        self._clock = clock

        self._entries: Dict[str, CacheEntry[T]] = {}
        self._lock = threading.RLock()

        # Statistics
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[T]:
        """
        Get cached value by key.

        Returns None if not cached or expired.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                if entry.is_fresh(self._clock(), self.ttl_seconds):
                    self._hits += 1
                    return entry.value
                # Expired
                del self._entries[key]
            self._misses += 1
        return None

    def put(self, key: str, value: T) -> None:
        """Store value under key, stamped with the current clock reading."""
        entry = CacheEntry(value=value, captured_at=self._clock())

        with self._lock:
            self._entries[key] = entry

            # Evict if over capacity
            if len(self._entries) > self.max_entries:
                self._evict_oldest()

    def _evict_oldest(self) -> None:
        """Remove oldest entries when over capacity."""
        entries = sorted(
            self._entries.items(),
            key=lambda x: x[1].captured_at
        )
        # Remove oldest 10%
        to_remove = max(1, len(entries) // 10)
        for key, _ in entries[:to_remove]:
            del self._entries[key]
        logger.debug(f'Evicted {to_remove} snapshot cache entries')

    def invalidate(self, key: str) -> None:
        """Remove specific entry from cache."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Clear entire cache."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            return {
                'entries': len(self._entries),
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': self._hits / total if total > 0 else 0,
                'ttl_seconds': self.ttl_seconds,
            }
