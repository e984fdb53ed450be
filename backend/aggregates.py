"""BoroughWatch Backend: Borough crime totals

Resolves (borough, category, month?) through memory cache -> SQLite store ->
data.police.uk, writing results back through both tiers.
"""

import time
import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from cache import MemoryCache, CacheEntry, TTLPolicy, ALWAYS_FRESH, is_fresh
from config import DEFAULT_CATEGORY, STORE_TTL
from errors import BoroughWatchError, GeometryMissing, StoreUnavailable
from models import AggregateRecord, BoroughTotal
from police_api import PoliceClient
from regions import RegionIndex
from background import BackgroundTasks
from store import CrimeStore

logger = logging.getLogger("boroughwatch.aggregates")


def aggregate_cache_key(borough_id: str, category: str, date: Optional[str]) -> str:
    return f"{borough_id}|{category}|{date or 'latest'}"


def _utc(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


class AggregateResolver:
    def __init__(
        self,
        regions: RegionIndex,
        police: PoliceClient,
        memory: MemoryCache,
        store: Optional[CrimeStore] = None,
        background: Optional[BackgroundTasks] = None,
        store_ttl: float = STORE_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.regions = regions
        self.police = police
        self.memory = memory
        self.store = store
        self.background = background or BackgroundTasks()
        self.latest_policy = TTLPolicy(store_ttl)
        self._clock = clock

    async def resolve(self, borough_id: str, category: str = DEFAULT_CATEGORY,
                      date: Optional[str] = None) -> AggregateRecord:
        region = self.regions.require(borough_id)
        if not region.has_geometry:
            raise GeometryMissing(f"Borough {borough_id} has no polygon geometry to query")

        cache_key = aggregate_cache_key(borough_id, category, date)
        cached, found = self.memory.get(cache_key)
        if found:
            logger.debug(f"Memory cache hit for {cache_key}")
            return cached

        stored = await self._from_store(borough_id, category, date)
        if stored is not None:
            logger.info(f"Store hit for {cache_key} ({stored.date})")
            self.memory.put(cache_key, stored)
            return stored

        record = await self._fetch_upstream(borough_id, region.query_strings, category, date)
        self.memory.put(cache_key, record)
        self._persist(record)
        return record

    async def _from_store(self, borough_id: str, category: str,
                          date: Optional[str]) -> Optional[AggregateRecord]:
        if self.store is None:
            return None
        try:
            row = await asyncio.to_thread(self.store.get_aggregate, borough_id, category, date)
        except StoreUnavailable as e:
            logger.warning(f"Store read skipped for {borough_id}/{category}: {e}")
            return None
        if row is None:
            return None

        policy = ALWAYS_FRESH if date else self.latest_policy
        if not is_fresh(CacheEntry(row.fetched_at, row), policy, self._clock()):
            logger.info(f"Stored latest total for {borough_id}/{category} is stale, refetching")
            return None
        return AggregateRecord(
            borough=borough_id,
            category=category,
            date=row.month,
            totalCrimes=row.total_crimes,
            fetchedAt=_utc(row.fetched_at),
        )

    async def _fetch_upstream(self, borough_id: str, query_strings, category: str,
                              date: Optional[str]) -> AggregateRecord:
        total_crimes = 0
        resolved_date = date
        for poly in query_strings:
            if not poly:
                continue
            crimes = await self.police.street_crimes(category, poly, date)
            if not resolved_date and crimes:
                resolved_date = crimes[0].get("month")
            total_crimes += len(crimes)

        logger.info(f"Fetched {borough_id}/{category}/{date or 'latest'}: {total_crimes} crimes "
                    f"over {len(query_strings)} polygon(s)")
        return AggregateRecord(
            borough=borough_id,
            category=category,
            date=resolved_date,
            totalCrimes=total_crimes,
            fetchedAt=_utc(self._clock()),
        )

    def _persist(self, record: AggregateRecord):
        if self.store is None:
            return
        if not record.date:
            # nothing to key the row on
            logger.debug(f"Not persisting {record.borough}/{record.category}: no month resolved")
            return
        self.background.submit(
            asyncio.to_thread(
                self.store.save_aggregate,
                record.borough, record.category, record.date, record.totalCrimes,
                record.fetchedAt.timestamp(),
            ),
            f"persist {record.borough}|{record.category}|{record.date}",
        )

    async def resolve_all(self, category: str = DEFAULT_CATEGORY,
                          date: Optional[str] = None) -> list[BoroughTotal]:
        """One total per borough in topology order; failures are recorded per borough."""
        self.regions.require_available()
        summaries = []
        for region in self.regions.all():
            try:
                record = await self.resolve(region.id, category, date)
                summaries.append(BoroughTotal(
                    borough=record.borough,
                    category=record.category,
                    date=record.date,
                    totalCrimes=record.totalCrimes,
                ))
            except BoroughWatchError as e:
                logger.warning(f"Total for {region.id} failed: {e.message}")
                summaries.append(BoroughTotal(
                    borough=region.id,
                    category=category,
                    date=date,
                    error=e.message,
                    status=e.status_code,
                ))
        return summaries
