"""In-memory search result cache.

Bounded map of ``(text, page, page_size) -> SearchResult`` with a fixed TTL.
Entries are never mutated: a ``put`` for an existing key replaces the entry
wholesale and moves it to the newest position. When the cache is full the
oldest insertion is evicted first.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass

from photosearch.schemas.search import SearchResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    key: Hashable
    value: SearchResult
    expires_at: float


class SearchCache:
    """TTL cache shared by every request handler in the process."""

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[Hashable, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> SearchResult | None:
        """Return the cached value for ``key`` if it has not expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                logger.debug("Search cache entry expired: %s", key)
                return None
            return entry.value

    def put(self, key: Hashable, value: SearchResult) -> CacheEntry:
        """Insert ``value`` under ``key``, evicting oldest insertions at capacity."""
        with self._lock:
            now = self._clock()
            self._entries.pop(key, None)
            self._purge_expired(now)
            while len(self._entries) >= self.max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                logger.debug("Search cache full, evicted %s", evicted_key)
            entry = CacheEntry(key=key, value=value, expires_at=now + self.ttl_seconds)
            self._entries[key] = entry
            return entry

    def clear(self) -> int:
        """Drop every entry. Returns the number of entries removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and self._clock() < entry.expires_at
