"""
Insight Cache.

Bounded, time-limited in-memory store for generated insights, keyed by
repository identity and last update time. Entries expire lazily on read;
inserts evict the oldest inserted entries once the cache grows past its
bound. All operations are synchronous and run on the event loop, so each
one is atomic with respect to other coroutines.
"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
import time
from typing import Callable, Optional

from config import logger
from exceptions import ConfigurationError
from insights.models import InsightPayload


@dataclass
class InsightCacheEntry:
    """
    A cached insight.

    Attributes:
        key (str): Cache key, ``"{full_name}-{updated_at}"``
        value (InsightPayload): Cached payload
        timestamp (float): Insert time read from the cache clock
    """

    key: str
    value: InsightPayload
    timestamp: float


class InsightCache:
    """
    TTL cache with insertion-ordered eviction.

    Attributes:
        ttl_seconds (float): Lifetime of an entry
        max_entries (int): Maximum number of entries kept
    """

    def __init__(
        self,
        ttl_seconds: float = 600,
        max_entries: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ConfigurationError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ConfigurationError("max_entries must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, InsightCacheEntry]" = OrderedDict()

    @staticmethod
    def key_for(full_name: str, updated_at: datetime) -> str:
        """Build the cache key of a repository at a given update time."""
        return f"{full_name}-{updated_at.isoformat()}"

    def get(self, key: str) -> Optional[InsightPayload]:
        """
        Return a live entry's payload.

        Expired entries are removed on access and reported as misses.

        Args:
            key (str): Cache key

        Returns:
            Optional[InsightPayload]: Cached payload, None on miss
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl_seconds:
            del self._entries[key]
            logger.debug({"message": "Insight cache entry expired", "key": key})
            return None
        return entry.value

    def put(self, key: str, value: InsightPayload) -> None:
        """
        Store a payload, evicting the oldest entries past the bound.

        Re-inserting an existing key moves it to the newest position and
        resets its timestamp.
        """
        self._entries.pop(key, None)
        self._entries[key] = InsightCacheEntry(key=key, value=value, timestamp=self._clock())
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug({"message": "Insight cache entry evicted", "key": evicted})

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
