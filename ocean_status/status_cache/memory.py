"""In-memory status cache with a fixed TTL measured from insertion."""

import threading
import time
from typing import Optional

from ocean_status.app_types import CacheEntry, MonotonicClock
from ocean_status.domain import AggregateResponse
from ocean_status.status_cache.base import StatusCache

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="status_cache/in_memory_status_cache")

DEFAULT_TTL_SECONDS = 600


class InMemoryStatusCache(StatusCache):
    """Thread-safe, TTL-aware cache for the life of the process."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: MonotonicClock = time.monotonic) -> None:
        """Initialize the cache with a TTL (seconds) and a monotonic clock."""
        logger.debug("Initializing InMemoryStatusCache", extra={"ttl_seconds": ttl_seconds})
        self.ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, region_id: str) -> Optional[AggregateResponse]:
        """Return a live entry; expired entries are evicted on read."""
        with self._lock:
            entry = self._entries.get(region_id)
            if entry is None:
                return None
            if self._clock() - entry.stored_at > self.ttl:
                del self._entries[region_id]
                logger.debug("Evicted expired status", extra={"region": region_id})
                return None
            return entry.data

    def put(self, region_id: str, response: AggregateResponse) -> None:
        """Store a response stamped with the current clock reading."""
        with self._lock:
            self._entries[region_id] = CacheEntry(data=response, stored_at=self._clock())

    def delete(self, region_id: str) -> None:
        with self._lock:
            self._entries.pop(region_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
