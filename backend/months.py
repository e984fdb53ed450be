"""BoroughWatch Backend: Catalog of months with published crime data"""

import time
import asyncio
import logging
from typing import Callable, Optional

from cache import MemoryCache, CacheEntry, TTLPolicy, is_fresh
from config import STORE_TTL
from errors import StoreUnavailable
from police_api import PoliceClient
from background import BackgroundTasks
from store import CrimeStore

logger = logging.getLogger("boroughwatch.months")

MONTHS_CACHE_KEY = "crime-months"


class MonthCatalog:
    """Global month list, most recent first. Memory -> store (6h) -> upstream."""

    def __init__(
        self,
        police: PoliceClient,
        memory: MemoryCache,
        store: Optional[CrimeStore] = None,
        background: Optional[BackgroundTasks] = None,
        store_ttl: float = STORE_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.police = police
        self.memory = memory
        self.store = store
        self.background = background or BackgroundTasks()
        self.store_policy = TTLPolicy(store_ttl)
        self._clock = clock

    async def months(self) -> list[str]:
        cached, found = self.memory.get(MONTHS_CACHE_KEY)
        if found:
            return list(cached)

        stored = await self._from_store()
        if stored:
            self.memory.put(MONTHS_CACHE_KEY, stored)
            return list(stored)

        months = await self.police.crime_dates()
        logger.info(f"Loaded {len(months)} crime months from upstream")
        self.memory.put(MONTHS_CACHE_KEY, months)
        if self.store is not None:
            self.background.submit(
                asyncio.to_thread(self.store.replace_months, list(months)),
                "replace crime months",
            )
        return list(months)

    async def _from_store(self) -> Optional[list[str]]:
        if self.store is None:
            return None
        try:
            months, fetched_at = await asyncio.to_thread(self.store.get_months)
        except StoreUnavailable as e:
            logger.warning(f"Store read skipped for crime months: {e}")
            return None
        if not months or fetched_at is None:
            return None
        if not is_fresh(CacheEntry(fetched_at, months), self.store_policy, self._clock()):
            logger.info("Stored crime months are stale, refetching")
            return None
        return months
