"""BoroughWatch Backend: TopoJSON decoding & ring geometry

Turns the quantised, delta-encoded arcs of a TopoJSON topology into closed
(lng, lat) rings and the compact `poly` strings data.police.uk expects.
"""

import json
import math
import logging
from pathlib import Path
from typing import Optional

import numpy as np

logger = logging.getLogger("boroughwatch.topology")

POINT_TOLERANCE = 1e-9

Point = tuple[float, float]
Ring = list[Point]


def load_topology(path) -> Optional[dict]:
    """Read a TopoJSON file. Returns None when missing or unparsable."""
    path = Path(path)
    if not path.exists():
        logger.warning(f"Topology file not found at {path}")
        return None
    try:
        with open(path, "rb") as f:
            return json.loads(f.read())
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load topology {path}: {e}")
        return None


def decode_arcs(raw_arcs: list, transform: Optional[dict] = None) -> list[Ring]:
    """Absolute coordinates for every arc (running sum of deltas, then scale + translate)."""
    transform = transform or {}
    sx, sy = transform.get("scale") or (1, 1)
    tx, ty = transform.get("translate") or (0, 0)
    scale = np.array([sx, sy], dtype=np.float64)
    translate = np.array([tx, ty], dtype=np.float64)

    decoded = []
    for arc in raw_arcs or []:
        if not arc:
            decoded.append([])
            continue
        deltas = np.asarray(arc, dtype=np.float64)[:, :2]
        absolute = translate + np.cumsum(deltas, axis=0) * scale
        decoded.append([(float(x), float(y)) for x, y in absolute])
    return decoded


def points_equal(a: Optional[Point], b: Optional[Point]) -> bool:
    if not a or not b:
        return False
    return abs(a[0] - b[0]) < POINT_TOLERANCE and abs(a[1] - b[1]) < POINT_TOLERANCE


def _resolve_arc(index: int, decoded_arcs: list[Ring]) -> Ring:
    # negative index i means arc ~i traversed backwards
    position = index if index >= 0 else ~index
    if position >= len(decoded_arcs):
        return []
    arc = decoded_arcs[position]
    return arc if index >= 0 else arc[::-1]


def close_ring(ring: Ring) -> Ring:
    if len(ring) < 2:
        return ring
    if not points_equal(ring[0], ring[-1]):
        return ring + [ring[0]]
    return ring


def build_ring(arc_indexes: list[int], decoded_arcs: list[Ring]) -> Ring:
    """Stitch signed arc references into one closed ring.

    Neighbouring arcs share their joining point, so every arc after the first
    usable one drops its leading point. Missing or empty arcs contribute nothing.
    """
    coords: Ring = []
    for index in arc_indexes or []:
        arc = _resolve_arc(index, decoded_arcs)
        if not arc:
            continue
        coords.extend(arc[1:] if coords else arc)
    return close_ring(coords)


def simplify_ring(ring: Ring, max_points: int) -> Ring:
    """Uniform decimation down to about `max_points`, keeping the closing point.

    Returns at most max_points + 1 points.
    """
    if len(ring) <= max_points:
        return ring
    stride = max(1, math.ceil(len(ring) / max_points))
    simplified = ring[::stride]
    if not points_equal(simplified[-1], ring[-1]):
        simplified.append(ring[-1])
    return simplified


def ring_to_poly_string(ring: Ring) -> str:
    return ":".join(f"{lat:.6f},{lng:.6f}" for lng, lat in ring)


def compute_centroid(rings: list[Ring]) -> Point:
    """Plain mean of every vertex across the rings (not area weighted)."""
    x_sum = 0.0
    y_sum = 0.0
    count = 0
    for ring in rings:
        for lng, lat in ring:
            x_sum += lng
            y_sum += lat
            count += 1
    if not count:
        return (0.0, 0.0)
    return (x_sum / count, y_sum / count)


def polygon_arc_sets(geometry: dict) -> list:
    """Normalise Polygon / MultiPolygon arcs to a list of polygons, each a list of rings."""
    geom_type = geometry.get("type")
    arcs = geometry.get("arcs") or []
    if geom_type == "Polygon":
        return [arcs]
    if geom_type == "MultiPolygon":
        return list(arcs)
    return []
