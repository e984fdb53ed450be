"""BoroughWatch Backend: Borough index built from the London topology"""

import logging
from dataclasses import dataclass
from typing import Optional

from config import MAX_POLY_POINTS, TOPOLOGY_OBJECT
from errors import NotFound, TopologyUnavailable
from topology import (
    Point, Ring,
    load_topology, decode_arcs, build_ring, simplify_ring,
    ring_to_poly_string, compute_centroid, polygon_arc_sets,
)

logger = logging.getLogger("boroughwatch.regions")


@dataclass(frozen=True)
class Region:
    id: str
    polygons: tuple[tuple[Ring, ...], ...]  # [0] of each polygon is the outer ring, the rest holes
    outer_rings: tuple[Ring, ...]
    centroid: Point
    query_strings: tuple[str, ...]

    @property
    def has_geometry(self) -> bool:
        return any(self.query_strings)


def build_region(geometry: dict, decoded_arcs: list[Ring], max_points: int = MAX_POLY_POINTS) -> Region:
    polygons = tuple(
        tuple(build_ring(ring_arcs, decoded_arcs) for ring_arcs in rings)
        for rings in polygon_arc_sets(geometry)
    )
    outer_rings = tuple(rings[0] if rings else [] for rings in polygons)
    return Region(
        id=str(geometry.get("id")),
        polygons=polygons,
        outer_rings=outer_rings,
        centroid=compute_centroid(list(outer_rings)),
        query_strings=tuple(ring_to_poly_string(simplify_ring(ring, max_points)) for ring in outer_rings),
    )


class RegionIndex:
    """Immutable borough id -> Region lookup, in topology order."""

    def __init__(self, regions: Optional[list[Region]] = None):
        self._regions = list(regions or [])
        self._by_id = {r.id: r for r in self._regions}

    @classmethod
    def from_topology(cls, topology: Optional[dict], object_name: str = TOPOLOGY_OBJECT,
                      max_points: int = MAX_POLY_POINTS) -> "RegionIndex":
        if not isinstance(topology, dict) or not topology:
            return cls()
        objects = topology.get("objects")
        collection = objects.get(object_name) if isinstance(objects, dict) else None
        if not isinstance(collection, dict) or not isinstance(collection.get("geometries"), list):
            logger.warning(f"Topology does not contain objects.{object_name}.geometries")
            return cls()
        try:
            decoded_arcs = decode_arcs(topology.get("arcs") or [], topology.get("transform"))
            regions = [build_region(g, decoded_arcs, max_points) for g in collection["geometries"]]
        except (TypeError, ValueError, KeyError, IndexError, AttributeError) as e:
            logger.warning(f"Malformed topology, borough geometry unavailable: {e}")
            return cls()
        logger.info(f"Built {len(regions)} boroughs from topology object '{object_name}'")
        return cls(regions)

    @property
    def available(self) -> bool:
        return bool(self._regions)

    def lookup(self, region_id: str) -> Optional[Region]:
        return self._by_id.get(region_id)

    def all(self) -> list[Region]:
        return list(self._regions)

    def require_available(self):
        if not self._regions:
            raise TopologyUnavailable(
                "Borough topology unavailable. Please ensure the London TopoJSON file is present."
            )

    def require(self, region_id: str) -> Region:
        self.require_available()
        region = self._by_id.get(region_id)
        if region is None:
            raise NotFound(f"Unknown borough: {region_id}")
        return region

    def __len__(self):
        return len(self._regions)

    def __iter__(self):
        return iter(self._regions)


def load_region_index(path, object_name: str = TOPOLOGY_OBJECT) -> RegionIndex:
    index = RegionIndex.from_topology(load_topology(path), object_name)
    if not index.available:
        logger.warning("No borough geometry loaded; borough endpoints will report topology unavailable")
    return index
