import math

import pytest

from topology import (
    decode_arcs, build_ring, close_ring, simplify_ring,
    ring_to_poly_string, compute_centroid, points_equal, polygon_arc_sets,
    load_topology,
)


def _circle(n_points: int) -> list[tuple[float, float]]:
    """Closed ring of n_points (last == first) around central London."""
    pts = [
        (-0.1 + 0.05 * math.cos(2 * math.pi * i / (n_points - 1)),
         51.5 + 0.03 * math.sin(2 * math.pi * i / (n_points - 1)))
        for i in range(n_points - 1)
    ]
    return pts + [pts[0]]


class TestDecodeArcs:
    def test_running_sum_with_identity_transform(self):
        arcs = decode_arcs([[[0, 0], [1, 0], [0, 1], [-1, 0], [0, -1]]],
                           {"scale": [1, 1], "translate": [0, 0]})
        assert arcs == [[(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)]]

    def test_scale_and_translate_apply_to_accumulated_value(self):
        arcs = decode_arcs([[[2, 1], [1, 1]]], {"scale": [0.5, 2], "translate": [-1, 50]})
        assert arcs == [[(0.0, 52.0), (0.5, 54.0)]]

    def test_missing_transform_is_identity(self):
        assert decode_arcs([[[3, 4], [1, 1]]]) == [[(3.0, 4.0), (4.0, 5.0)]]

    def test_empty_arc_decodes_to_empty(self):
        assert decode_arcs([[], [[1, 1]]], None) == [[], [(1.0, 1.0)]]


class TestBuildRing:
    ARCS = decode_arcs([
        [[10, 0], [1, 0], [0, 1]],
        [[11, 1], [-1, 0], [0, -1]],
    ])

    def test_shared_endpoint_dropped_between_arcs(self):
        ring = build_ring([0, 1], self.ARCS)
        assert ring == [(10, 0), (11, 0), (11, 1), (10, 1), (10, 0)]

    def test_negative_index_walks_arc_backwards(self):
        ring = build_ring([-2, -1], self.ARCS)
        assert ring == [(10, 0), (10, 1), (11, 1), (11, 0), (10, 0)]

    def test_open_ring_is_closed(self):
        ring = build_ring([0], self.ARCS)
        assert ring == [(10, 0), (11, 0), (11, 1), (10, 0)]

    def test_missing_and_empty_arcs_are_skipped(self):
        arcs = self.ARCS + [[]]
        assert build_ring([0, 7, 2, 1], arcs) == build_ring([0, 1], self.ARCS)

    def test_close_ring_leaves_short_rings_alone(self):
        assert close_ring([]) == []
        assert close_ring([(1.0, 2.0)]) == [(1.0, 2.0)]

    def test_close_ring_uses_tolerance(self):
        ring = [(0.0, 0.0), (1.0, 0.0), (1e-12, 0.0)]
        assert close_ring(ring) == ring


class TestSimplifyRing:
    def test_short_ring_unchanged(self):
        ring = _circle(30)
        assert simplify_ring(ring, 35) is ring

    def test_exact_stride_keeps_closing_point(self):
        ring = _circle(100)
        simplified = simplify_ring(ring, 35)
        assert simplified == ring[::3]
        assert simplified[-1] == ring[-1]

    def test_closing_point_appended_when_missed(self):
        ring = _circle(101)
        simplified = simplify_ring(ring, 35)
        assert simplified[:-1] == ring[::3]
        assert simplified[-1] == ring[-1]

    @pytest.mark.parametrize("n_points", [36, 50, 71, 199, 512, 1000])
    def test_bounded_and_closed(self, n_points):
        ring = _circle(n_points)
        simplified = simplify_ring(ring, 35)
        assert len(simplified) <= 36
        assert points_equal(simplified[-1], ring[-1])
        assert points_equal(simplified[0], simplified[-1])


class TestPolyString:
    def test_worked_example(self):
        ring = [(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)]
        assert ring_to_poly_string(ring) == (
            "0.000000,0.000000:0.000000,1.000000:1.000000,1.000000:"
            "1.000000,0.000000:0.000000,0.000000"
        )

    def test_reparses_to_rounded_coordinates(self):
        ring = simplify_ring(_circle(400), 35)
        encoded = ring_to_poly_string(ring)
        parsed = []
        for pair in encoded.split(":"):
            lat, lng = pair.split(",")
            parsed.append((float(lng), float(lat)))
        assert parsed == [(round(lng, 6), round(lat, 6)) for lng, lat in ring]

    def test_stays_under_transport_limit(self):
        encoded = ring_to_poly_string(simplify_ring(_circle(5000), 35))
        assert len(encoded) < 4096


class TestCentroid:
    def test_plain_vertex_mean(self):
        ring = [(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)]
        assert compute_centroid([ring]) == pytest.approx((0.4, 0.4))

    def test_mean_spans_all_rings(self):
        a = [(0.0, 0.0), (2.0, 0.0)]
        b = [(4.0, 6.0)]
        assert compute_centroid([a, b]) == (2.0, 2.0)

    def test_no_points(self):
        assert compute_centroid([]) == (0.0, 0.0)


class TestPolygonArcSets:
    def test_polygon_wrapped(self):
        assert polygon_arc_sets({"type": "Polygon", "arcs": [[0], [1]]}) == [[[0], [1]]]

    def test_multipolygon_passthrough(self):
        arcs = [[[0]], [[1], [2]]]
        assert polygon_arc_sets({"type": "MultiPolygon", "arcs": arcs}) == arcs

    def test_other_types_have_no_polygons(self):
        assert polygon_arc_sets({"type": None}) == []
        assert polygon_arc_sets({"type": "LineString", "arcs": [0]}) == []


class TestLoadTopology:
    def test_missing_file(self, tmp_path):
        assert load_topology(tmp_path / "nope.json") is None

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        assert load_topology(path) is None

    def test_reads_json(self, tmp_path):
        path = tmp_path / "topo.json"
        path.write_text('{"type": "Topology", "arcs": []}')
        assert load_topology(path) == {"type": "Topology", "arcs": []}
