"""BoroughWatch Backend: FastAPI Routes"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import DEFAULT_CATEGORY, DEFAULT_TREND_MONTHS
from errors import BoroughWatchError
from models import (
    AggregateRecord, BoroughInfo, BoroughListResponse, CrimeMonthsResponse,
    CrimeTotalsResponse, HealthResponse, TrendResponse,
)
from services import Services, build_services

logger = logging.getLogger("boroughwatch")


# ─────────────────────────── App Setup ──────────────────────────

app = FastAPI(title="BoroughWatch Crime API", version="1.0.0")

services: Optional[Services] = None


def get_services() -> Services:
    global services
    if services is None:
        services = build_services()
    return services


@app.on_event("startup")
async def startup_event():
    """Load borough topology and open the store once per process."""
    get_services()


@app.on_event("shutdown")
async def shutdown_event():
    if services is not None:
        await services.shutdown()


@app.exception_handler(BoroughWatchError)
async def borough_error_handler(request: Request, exc: BoroughWatchError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def _clean(value: Optional[str], fallback: Optional[str] = None) -> Optional[str]:
    value = (value or "").strip()
    return value or fallback


def _positive_int(value: Optional[str], fallback: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return fallback
    return parsed if parsed > 0 else fallback


# ─────────────────────────── Endpoints ──────────────────────────

@app.get("/api/health", response_model=HealthResponse)
async def health():
    svc = get_services()
    return HealthResponse(
        status="ok" if svc.regions.available else "degraded",
        boroughs=len(svc.regions),
        storeEnabled=svc.store is not None,
    )


@app.get("/api/boroughs", response_model=BoroughListResponse)
async def list_boroughs():
    svc = get_services()
    svc.regions.require_available()
    return BoroughListResponse(boroughs=[
        BoroughInfo(id=r.id, centroid=list(r.centroid), polygons=len(r.polygons))
        for r in svc.regions.all()
    ])


@app.get("/api/crime-months", response_model=CrimeMonthsResponse)
async def crime_months():
    return CrimeMonthsResponse(months=await get_services().catalog.months())


@app.get("/api/crimes", response_model=AggregateRecord)
async def borough_crimes(borough: str = "", category: str = DEFAULT_CATEGORY, date: Optional[str] = None):
    svc = get_services()
    svc.regions.require_available()
    borough_id = _clean(borough)
    if not borough_id:
        return JSONResponse(status_code=400, content={"error": 'Query parameter "borough" is required'})
    return await svc.resolver.resolve(borough_id, _clean(category, DEFAULT_CATEGORY), _clean(date))


@app.get("/api/boroughs/crime-totals", response_model=CrimeTotalsResponse)
async def crime_totals(category: str = DEFAULT_CATEGORY, date: Optional[str] = None):
    svc = get_services()
    category = _clean(category, DEFAULT_CATEGORY)
    requested_date = _clean(date)
    summaries = await svc.resolver.resolve_all(category, requested_date)
    return CrimeTotalsResponse(
        category=category,
        requestedDate=requested_date,
        generatedAt=datetime.now(timezone.utc),
        summaries=summaries,
    )


@app.get("/api/boroughs/{borough_id}/trend", response_model=TrendResponse)
async def borough_trend(borough_id: str, months: Optional[str] = None, category: str = DEFAULT_CATEGORY):
    borough_id = _clean(borough_id)
    if not borough_id:
        return JSONResponse(status_code=400, content={"error": "Missing borough id"})
    month_count = _positive_int(months, DEFAULT_TREND_MONTHS)
    return await get_services().trends.trend(borough_id, _clean(category, DEFAULT_CATEGORY), month_count)
