import copy
import threading
import time
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    key: str
    payload: Any
    inserted_at: float


class TTLCache:
    """
    In-process result cache with a time-to-live per entry.

    One lock guards every read and write. Entries older than ``ttl_seconds``
    are never returned, but stay in memory until an eviction pass removes them.
    Payloads are deep-copied on the way in and out so callers cannot mutate
    a stored entry.
    Subclasses decide how room is made when the cache is over capacity.
    """

    def __init__(
        self,
        max_entries: int,
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.time,
        name: str = "cache"
    ):
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.inserted_at >= self.ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        """Return the cached payload, or None on a miss or an expired entry."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or self._expired(entry, self._clock()):
                return None
            return copy.deepcopy(entry.payload)

    def set(self, key: str, payload: Any) -> None:
        with self._lock:
            now = self._clock()
            self._store(key, CacheEntry(key=key, payload=copy.deepcopy(payload), inserted_at=now), now)

    def _store(self, key: str, entry: CacheEntry, now: float) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info(f"{self.name} cleared")

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            size = len(self._entries)
        return {
            "size": size,
            "maxSize": self.max_entries,
            "ttlSeconds": self.ttl_seconds,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries


class SweepingTTLCache(TTLCache):
    """
    Insert first, then sweep expired entries once the cache is over capacity.

    Live entries are never evicted, so the cache can stay above
    ``max_entries`` until some of them expire.
    """

    def _store(self, key: str, entry: CacheEntry, now: float) -> None:
        self._entries[key] = entry

        if len(self._entries) > self.max_entries:
            expired = [k for k, e in self._entries.items() if self._expired(e, now)]
            for k in expired:
                del self._entries[k]
            if expired:
                logger.debug(f"{self.name}: swept {len(expired)} expired entries")


class FifoTTLCache(TTLCache):
    """Evict the single oldest-inserted entry when a new key arrives at capacity."""

    def _store(self, key: str, entry: CacheEntry, now: float) -> None:
        # Re-inserting a key moves it to the back of the queue
        self._entries.pop(key, None)

        if len(self._entries) >= self.max_entries:
            oldest_key, _ = self._entries.popitem(last=False)
            logger.debug(f"{self.name}: evicted oldest entry {oldest_key}")

        self._entries[key] = entry
