"""BoroughWatch Backend: Month-by-month crime trend for one borough"""

import logging

from aggregates import AggregateResolver
from cache import MemoryCache
from config import DEFAULT_CATEGORY, DEFAULT_TREND_MONTHS
from errors import BoroughWatchError
from models import TrendPoint, TrendResponse
from months import MonthCatalog

logger = logging.getLogger("boroughwatch.trends")


def trend_cache_key(borough_id: str, category: str, month_count: int) -> str:
    return f"{borough_id}|trend|{category}|{month_count}"


class TrendAssembler:
    def __init__(self, resolver: AggregateResolver, catalog: MonthCatalog, memory: MemoryCache):
        self.resolver = resolver
        self.catalog = catalog
        self.memory = memory

    async def trend(self, borough_id: str, category: str = DEFAULT_CATEGORY,
                    month_count: int = DEFAULT_TREND_MONTHS) -> TrendResponse:
        self.resolver.regions.require(borough_id)

        key = trend_cache_key(borough_id, category, month_count)
        cached, found = self.memory.get(key)
        if found:
            return cached

        months = (await self.catalog.months())[:month_count]
        timeline = []
        # one month at a time, timeline keeps catalog order
        for month in months:
            try:
                record = await self.resolver.resolve(borough_id, category, month)
                timeline.append(TrendPoint(month=month, totalCrimes=record.totalCrimes))
            except BoroughWatchError as e:
                logger.warning(f"Trend month {month} for {borough_id} failed: {e.message}")
                timeline.append(TrendPoint(month=month, error=e.message, status=e.status_code))

        response = TrendResponse(borough=borough_id, category=category, timeline=timeline)
        self.memory.put(key, response)
        return response
