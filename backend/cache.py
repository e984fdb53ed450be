"""BoroughWatch Backend: In-memory cache with pluggable freshness policies"""

import time
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from cachetools import LRUCache

logger = logging.getLogger("boroughwatch.cache")


@dataclass(frozen=True)
class CacheEntry:
    fetched_at: float  # epoch seconds, wall clock
    payload: Any


class TTLPolicy:
    """Fresh while younger than `ttl` seconds."""

    def __init__(self, ttl: float):
        self.ttl = ttl

    def is_fresh(self, fetched_at: float, now: float) -> bool:
        return now - fetched_at < self.ttl

    def __repr__(self):
        return f"TTLPolicy(ttl={self.ttl})"


class AlwaysFresh:
    """Historical months never change once counted."""

    def is_fresh(self, fetched_at: float, now: float) -> bool:
        return True

    def __repr__(self):
        return "AlwaysFresh()"


ALWAYS_FRESH = AlwaysFresh()


def is_fresh(entry: Optional[CacheEntry], policy, now: Optional[float] = None) -> bool:
    if entry is None:
        return False
    if now is None:
        now = time.time()
    return policy.is_fresh(entry.fetched_at, now)


class MemoryCache:
    """Process-local cache keyed by composite strings.

    Entries are kept in an LRU of bounded size; staleness is decided on read
    by the freshness policy, so expired entries simply miss until overwritten
    or evicted.
    """

    def __init__(self, policy, max_size: int = 2000, clock: Callable[[], float] = time.time):
        self._store: LRUCache = LRUCache(maxsize=max_size)
        self._policy = policy
        self._clock = clock

    def get(self, key: str, policy=None) -> tuple[Any, bool]:
        entry = self._store.get(key)
        if not is_fresh(entry, policy or self._policy, self._clock()):
            return None, False
        return entry.payload, True

    def entry(self, key: str) -> Optional[CacheEntry]:
        return self._store.get(key)

    def put(self, key: str, value: Any, fetched_at: Optional[float] = None):
        self._store[key] = CacheEntry(
            fetched_at=self._clock() if fetched_at is None else fetched_at,
            payload=value,
        )

    def clear(self):
        self._store.clear()

    def __len__(self):
        return len(self._store)

    def __contains__(self, key):
        return key in self._store
