"""Time-boxed in-memory cache for fetched feed data."""
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar
import logging
import time

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 5 * 60


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Last successful result and when it was stored."""
    data: T
    timestamp: float


class FetchCache(Generic[T]):
    """Single-slot cache with a time-to-live.

    The clock is injectable so expiry can be controlled in tests.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entry: Optional[CacheEntry[T]] = None

    def get(self) -> Optional[CacheEntry[T]]:
        """Return the current entry, fresh or not."""
        return self._entry

    def age(self, entry: CacheEntry[T]) -> float:
        return self.clock() - entry.timestamp

    def is_fresh(self, entry: Optional[CacheEntry[T]]) -> bool:
        return entry is not None and self.age(entry) < self.ttl_seconds

    def store(self, data: T) -> CacheEntry[T]:
        """Replace the cached entry with new data."""
        self._entry = CacheEntry(data=data, timestamp=self.clock())
        return self._entry

    def invalidate(self) -> None:
        if self._entry is not None:
            logger.debug("Invalidating cache entry")
        self._entry = None
