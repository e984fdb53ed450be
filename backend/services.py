"""BoroughWatch Backend: Service wiring

Builds the region index, caches, store and resolvers once per process.
"""

import time
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from aggregates import AggregateResolver
from background import BackgroundTasks
from cache import MemoryCache, TTLPolicy
from config import (
    TOPOLOGY_PATH, TOPOLOGY_OBJECT, CRIME_DB_PATH,
    MEMORY_CACHE_TTL, MEMORY_CACHE_SIZE, STORE_TTL,
)
from months import MonthCatalog
from police_api import PoliceClient
from regions import RegionIndex, load_region_index
from store import CrimeStore, open_store
from trends import TrendAssembler

logger = logging.getLogger("boroughwatch.services")

_FROM_CONFIG = object()


@dataclass
class Services:
    regions: RegionIndex
    police: PoliceClient
    store: Optional[CrimeStore]
    background: BackgroundTasks
    resolver: AggregateResolver
    catalog: MonthCatalog
    trends: TrendAssembler

    async def shutdown(self):
        await self.background.drain()
        await self.police.aclose()


def build_services(
    regions: Optional[RegionIndex] = None,
    police: Optional[PoliceClient] = None,
    store=_FROM_CONFIG,
    clock: Callable[[], float] = time.time,
    memory_ttl: float = MEMORY_CACHE_TTL,
    store_ttl: float = STORE_TTL,
) -> Services:
    """Wire everything together. Pass regions/police/store to override the configured ones.

    store=None runs without a persistent store.
    """
    if regions is None:
        regions = load_region_index(TOPOLOGY_PATH, TOPOLOGY_OBJECT)
    if police is None:
        police = PoliceClient()
    if store is _FROM_CONFIG:
        store = open_store(CRIME_DB_PATH, clock=clock)

    background = BackgroundTasks()
    memory_policy = TTLPolicy(memory_ttl)
    aggregate_cache = MemoryCache(memory_policy, max_size=MEMORY_CACHE_SIZE, clock=clock)
    months_cache = MemoryCache(memory_policy, max_size=4, clock=clock)
    trend_cache = MemoryCache(memory_policy, max_size=MEMORY_CACHE_SIZE, clock=clock)

    resolver = AggregateResolver(regions, police, aggregate_cache, store=store,
                                 background=background, store_ttl=store_ttl, clock=clock)
    catalog = MonthCatalog(police, months_cache, store=store,
                           background=background, store_ttl=store_ttl, clock=clock)
    trends = TrendAssembler(resolver, catalog, trend_cache)

    logger.info(f"Services ready: {len(regions)} boroughs, store {'enabled' if store else 'disabled'}")
    return Services(
        regions=regions, police=police, store=store, background=background,
        resolver=resolver, catalog=catalog, trends=trends,
    )
