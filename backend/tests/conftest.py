"""Shared fixtures: tiny topologies, a controllable clock and a fake Police API."""

import httpx
import pytest

from police_api import PoliceClient
from regions import RegionIndex
from store import CrimeStore

BASE_URL = "https://police.test/api"


# Square at the origin, used by the worked example.
SQUARE_TOPOLOGY = {
    "type": "Topology",
    "transform": {"scale": [1, 1], "translate": [0, 0]},
    "arcs": [[[0, 0], [1, 0], [0, 1], [-1, 0], [0, -1]]],
    "objects": {
        "london_geo": {
            "type": "GeometryCollection",
            "geometries": [{"type": "Polygon", "id": "Square", "arcs": [[0]]}],
        }
    },
}

# Camden: two separate squares. Hackney and Islington share arcs 2 and 3,
# Islington walking them backwards. Nowhere has no geometry at all.
BOROUGH_TOPOLOGY = {
    "type": "Topology",
    "transform": {"scale": [1, 1], "translate": [0, 0]},
    "arcs": [
        [[0, 0], [1, 0], [0, 1], [-1, 0], [0, -1]],
        [[5, 5], [1, 0], [0, 1], [-1, 0], [0, -1]],
        [[10, 0], [1, 0], [0, 1]],
        [[11, 1], [-1, 0], [0, -1]],
    ],
    "objects": {
        "london_geo": {
            "type": "GeometryCollection",
            "geometries": [
                {"type": "MultiPolygon", "id": "Camden", "arcs": [[[0]], [[1]]]},
                {"type": "Polygon", "id": "Hackney", "arcs": [[2, 3]]},
                {"type": "Polygon", "id": "Islington", "arcs": [[-4, -3]]},
                {"type": None, "id": "Nowhere"},
            ],
        }
    },
}


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakePoliceAPI:
    """Stands in for data.police.uk behind httpx.MockTransport.

    Every crimes-street call returns `crimes_per_poly` crimes (or the count in
    `counts_by_poly` for that poly string), stamped with the requested month
    or `latest_month`.
    """

    def __init__(self, crimes_per_poly: int = 3, latest_month: str = "2025-09",
                 months=None):
        self.crimes_per_poly = crimes_per_poly
        self.counts_by_poly: dict[str, int] = {}
        self.latest_month = latest_month
        self.months = months if months is not None else ["2025-09", "2025-08", "2025-07"]
        self.failing_months: dict[str, int] = {}
        self.failing_polys: dict[str, int] = {}
        self.dates_status = 200
        self.calls: list[httpx.Request] = []

    @property
    def crime_calls(self) -> list[httpx.Request]:
        return [r for r in self.calls if "/crimes-street/" in r.url.path]

    @property
    def date_calls(self) -> list[httpx.Request]:
        return [r for r in self.calls if r.url.path.endswith("/crimes-street-dates")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if request.url.path.endswith("/crimes-street-dates"):
            if self.dates_status != 200:
                return httpx.Response(self.dates_status, text="dates unavailable")
            return httpx.Response(200, json=[{"date": m, "stop-and-search": []} for m in self.months])

        poly = request.url.params.get("poly", "")
        date = request.url.params.get("date")
        if date in self.failing_months:
            return httpx.Response(self.failing_months[date], text=f"no data for {date}")
        if poly in self.failing_polys:
            return httpx.Response(self.failing_polys[poly], text="poly rejected")

        count = self.counts_by_poly.get(poly, self.crimes_per_poly)
        month = date or self.latest_month
        crimes = [{"category": "burglary", "month": month, "id": i} for i in range(count)]
        return httpx.Response(200, json=crimes)

    def client(self) -> PoliceClient:
        transport = httpx.MockTransport(self.handler)
        return PoliceClient(httpx.AsyncClient(transport=transport), base_url=BASE_URL)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def police_api():
    return FakePoliceAPI()


@pytest.fixture
def regions():
    return RegionIndex.from_topology(BOROUGH_TOPOLOGY)


@pytest.fixture
def crime_store(tmp_path, clock):
    store = CrimeStore(tmp_path / "crime.db", clock=clock)
    store.init_schema()
    return store
