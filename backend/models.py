"""BoroughWatch Backend: Pydantic Models"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class AggregateRecord(BaseModel):
    borough: str
    category: str
    date: Optional[str] = None  # YYYY-MM; None when "latest" returned no crimes
    totalCrimes: int = Field(ge=0)
    fetchedAt: datetime


class BoroughTotal(BaseModel):
    """One row of a whole-city batch: either a count or the reason it failed."""
    borough: str
    category: str
    date: Optional[str] = None
    totalCrimes: Optional[int] = None
    error: Optional[str] = None
    status: Optional[int] = None


class CrimeTotalsResponse(BaseModel):
    category: str
    requestedDate: Optional[str] = None
    generatedAt: datetime
    summaries: list[BoroughTotal]


class TrendPoint(BaseModel):
    month: str
    totalCrimes: Optional[int] = None
    error: Optional[str] = None
    status: Optional[int] = None


class TrendResponse(BaseModel):
    borough: str
    category: str
    timeline: list[TrendPoint]


class BoroughInfo(BaseModel):
    id: str
    centroid: list[float]  # [lng, lat]
    polygons: int


class BoroughListResponse(BaseModel):
    boroughs: list[BoroughInfo]


class CrimeMonthsResponse(BaseModel):
    months: list[str]


class HealthResponse(BaseModel):
    status: str
    boroughs: int
    storeEnabled: bool
