"""BoroughWatch Backend: data.police.uk client"""

import logging
from typing import Optional

import httpx

from config import POLICE_API_BASE, HTTP_TIMEOUT
from errors import UpstreamError

logger = logging.getLogger("boroughwatch.police")


class PoliceClient:
    """Read-only calls against the Police API. Any non-2xx is a hard failure."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, base_url: str = POLICE_API_BASE):
        self.client = client or httpx.AsyncClient(timeout=HTTP_TIMEOUT)
        self.base_url = base_url.rstrip("/")

    async def _get_json(self, path: str, params: Optional[dict] = None, label: str = "Police API"):
        url = f"{self.base_url}/{path}"
        try:
            resp = await self.client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"{label} request failed: {e}")
            raise UpstreamError(502, f"{label} unreachable: {e}") from e

        if not resp.is_success:
            body = resp.text
            logger.warning(f"{label} error {resp.status_code} for {path}")
            raise UpstreamError(
                resp.status_code,
                f"{label} error ({resp.status_code}): {body or 'request failed'}",
                body=body,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(502, f"{label} returned invalid JSON: {e}") from e

    async def street_crimes(self, category: str, poly: str, date: Optional[str] = None) -> list[dict]:
        """Crimes inside one polygon, for one month (latest month when date is None)."""
        params = {"poly": poly}
        if date:
            params["date"] = date
        crimes = await self._get_json(f"crimes-street/{category}", params)
        return crimes if isinstance(crimes, list) else []

    async def crime_dates(self) -> list[str]:
        """Months with published data, most recent first."""
        entries = await self._get_json("crimes-street-dates", label="Crime months")
        months = []
        for entry in entries or []:
            month = entry if isinstance(entry, str) else (entry or {}).get("date")
            if month:
                months.append(month)
        return months

    async def aclose(self):
        await self.client.aclose()
