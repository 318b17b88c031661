"""
IntersectionCalculator Tests - paarweise Routinen, Dispatch, Cutter-Listen
und Strahl-Verlängerung.
"""

import math

import pytest

from config.feature_flags import set_flag
from config.tolerances import TolerancePolicy
from drafting.geometry import Arc, Circle, Line, Polyline, Rectangle, UnsupportedOperationError
from drafting.intersection import (
    IntersectionCalculator, circle_circle, line_circle, line_line, line_line_infinite,
)
from drafting.vector import Vector2


def V(x, y):
    return Vector2(float(x), float(y))


@pytest.fixture
def calc():
    return IntersectionCalculator()


class TestLineLine:
    def test_crossing_segments(self):
        hits = line_line(Line(V(0, 0), V(10, 0)), Line(V(5, -5), V(5, 5)))
        assert len(hits) == 1
        assert hits[0].point.equals(V(5, 0), 1e-12)
        assert math.isclose(hits[0].t1, 0.5, abs_tol=1e-12)
        assert math.isclose(hits[0].t2, 0.5, abs_tol=1e-12)

    def test_segments_not_reaching(self):
        assert line_line(Line(V(0, 0), V(1, 0)), Line(V(5, -5), V(5, 5))) == []

    def test_parallel_lines(self):
        assert line_line(Line(V(0, 0), V(10, 0)), Line(V(0, 1), V(10, 1))) == []

    def test_collinear_overlap_off_by_default(self):
        a = Line(V(0, 0), V(10, 0))
        b = Line(V(5, 0), V(15, 0))
        assert line_line(a, b) == []

    def test_collinear_overlap_with_flag(self):
        set_flag("line_overlap_detection", True)
        a = Line(V(0, 0), V(10, 0))
        b = Line(V(5, 0), V(15, 0))
        hits = line_line(a, b)
        assert [h.point for h in hits] == [V(5, 0), V(10, 0)]

    def test_infinite_lines(self):
        point, t, u = line_line_infinite(V(0, 0), V(1, 0), V(5, 1), V(5, 2))
        assert point.equals(V(5, 0), 1e-12)
        assert math.isclose(t, 5.0, abs_tol=1e-12)
        assert math.isclose(u, -1.0, abs_tol=1e-12)
        assert line_line_infinite(V(0, 0), V(1, 0), V(0, 1), V(1, 1)) is None


class TestLineCircle:
    def test_secant(self):
        hits = line_circle(Line(V(-5, 0), V(5, 0)), Circle(V(0, 0), 2.0))
        assert len(hits) == 2
        assert hits[0].point.equals(V(-2, 0), 1e-9)
        assert hits[1].point.equals(V(2, 0), 1e-9)
        assert math.isclose(hits[0].t1, 0.3, abs_tol=1e-9)
        assert math.isclose(hits[1].t2, 0.0, abs_tol=1e-9)

    def test_tangent_gives_single_point(self):
        hits = line_circle(Line(V(-5, 2), V(5, 2)), Circle(V(0, 0), 2.0))
        assert len(hits) == 1
        assert hits[0].point.equals(V(0, 2), 1e-6)

    def test_miss_and_segment_too_short(self):
        assert line_circle(Line(V(-5, 3), V(5, 3)), Circle(V(0, 0), 2.0)) == []
        assert line_circle(Line(V(-1, 0), V(1, 0)), Circle(V(0, 0), 2.0)) == []


class TestCircleCircle:
    def test_two_unit_circles(self):
        hits = circle_circle(Circle(V(0, 0), 1.0), Circle(V(1, 0), 1.0))
        assert len(hits) == 2
        for hit in hits:
            assert math.isclose(hit.point.distance_to(V(0, 0)), 1.0, abs_tol=1e-9)
            assert math.isclose(hit.point.distance_to(V(1, 0)), 1.0, abs_tol=1e-9)
            assert math.isclose(hit.point.x, 0.5, abs_tol=1e-9)
        assert math.isclose(hits[0].point.y, -hits[1].point.y, abs_tol=1e-9)

    def test_external_tangent(self):
        hits = circle_circle(Circle(V(0, 0), 1.0), Circle(V(2, 0), 1.0))
        assert len(hits) == 1
        assert hits[0].point.equals(V(1, 0), 1e-9)

    @pytest.mark.parametrize("c2", [
        Circle(V(5, 0), 1.0),      # zu weit
        Circle(V(0.5, 0), 0.2),    # ineinander
        Circle(V(0, 0), 1.0),      # deckungsgleich
    ])
    def test_no_intersection(self, c2):
        assert circle_circle(Circle(V(0, 0), 1.0), c2) == []


class TestCalculator:
    def test_dispatch_circle_line_swaps_parameters(self, calc):
        line = Line(V(-5, 0), V(5, 0))
        circle = Circle(V(0, 0), 2.0)
        forward = calc.intersect(line, circle)
        backward = calc.intersect(circle, line)
        assert [h.point for h in forward] == [h.point for h in backward]
        assert forward[0].t1 == backward[0].t2

    @pytest.mark.parametrize("other", [
        Arc(V(0, 0), 1.0, 0.0, math.pi),
        Polyline([V(0, 0), V(1, 1)]),
        Rectangle(V(0, 0), V(1, 1)),
    ])
    def test_unsupported_pairs_raise(self, calc, other):
        with pytest.raises(UnsupportedOperationError):
            calc.intersect(Line(V(-5, 0), V(5, 0)), other)

    def test_find_all_intersections_sorted_and_tagged(self, calc):
        target = Line(V(0, 0), V(10, 0))
        c1 = Line(V(8, -1), V(8, 1))
        c2 = Line(V(2, -1), V(2, 1))
        rect = Rectangle(V(4, -1), V(6, 1))
        arc = Arc(V(5, 0), 3.0, 0.0, math.pi)
        cuts = calc.find_all_intersections(target, [c1, c2, rect, arc, target])
        assert [round(c.t, 6) for c in cuts] == [0.2, 0.4, 0.6, 0.8]
        assert cuts[0].cutter is c2
        assert cuts[1].cutter is rect and cuts[2].cutter is rect
        assert cuts[3].cutter is c1

    def test_extend_to_line(self, calc):
        line = Line(V(0, 0), V(2, 0))
        wall = Line(V(10, -5), V(10, 5))
        assert calc.extend_line_to_entity(line, wall).equals(V(10, 0), 1e-9)

    def test_extend_ignores_hits_behind_end(self, calc):
        line = Line(V(0, 0), V(2, 0))
        assert calc.extend_line_to_entity(line, Line(V(-3, -5), V(-3, 5))) is None
        assert calc.extend_line_to_entity(line, Line(V(1, -5), V(1, 5))) is None

    def test_extend_requires_hit_on_bounded_segment(self, calc):
        line = Line(V(0, 0), V(2, 0))
        assert calc.extend_line_to_entity(line, Line(V(10, 1), V(10, 5))) is None

    def test_extend_to_circle_takes_nearest_hit(self, calc):
        line = Line(V(0, 0), V(1, 0))
        hit = calc.extend_line_to_entity(line, Circle(V(10, 0), 3.0))
        assert hit.equals(V(7, 0), 1e-9)

    def test_extend_from_inside_circle(self, calc):
        line = Line(V(9, 0), V(10, 0))
        hit = calc.extend_line_to_entity(line, Circle(V(10, 0), 3.0))
        assert hit.equals(V(13, 0), 1e-9)

    def test_extend_to_arc_respects_sweep(self, calc):
        line = Line(V(0, 0), V(1, 0))
        left_half = Arc(V(10, 0), 3.0, math.pi / 2.0, 3.0 * math.pi / 2.0)
        right_half = Arc(V(10, 0), 3.0, -math.pi / 2.0, math.pi / 2.0)
        assert calc.extend_line_to_entity(line, left_half).equals(V(7, 0), 1e-9)
        assert calc.extend_line_to_entity(line, right_half).equals(V(13, 0), 1e-9)

    def test_closest_intersection(self):
        points = [V(5, 0), V(1, 0), V(3, 0)]
        assert IntersectionCalculator.closest_intersection(points, V(0, 0)) == V(1, 0)
        assert IntersectionCalculator.closest_intersection([], V(0, 0)) is None


class TestScaleRelativeTolerances:
    def test_relative_policy_merges_nearby_points_at_large_scale(self):
        legacy = TolerancePolicy.legacy()
        relative = TolerancePolicy.scale_relative()
        assert legacy.for_extent(1e9) is legacy
        scaled = relative.for_extent(1e9)
        assert scaled.point > legacy.point
        assert scaled.point <= relative.relative_max

    def test_calculator_uses_injected_policy(self):
        calc = IntersectionCalculator(TolerancePolicy.scale_relative())
        hits = calc.intersect(Line(V(0, 0), V(10, 0)), Line(V(5, -5), V(5, 5)))
        assert len(hits) == 1
