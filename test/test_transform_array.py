"""
Transform/Array Tests - Spiegeln, Drehen, Skalieren, Ausrichten, Verteilen
und rechteckige/polare/Pfad-Arrays.
"""

import math

import pytest

from drafting.geometry import Arc, Circle, Line, Polyline, Rectangle
from drafting.operations import (
    Alignment, ArrayOperation, DistributeAxis, ResultStatus, TransformOperation,
)
from drafting.vector import Vector2


def V(x, y):
    return Vector2(float(x), float(y))


def centers(entities):
    return [e.bounding_box().center for e in entities]


def assert_points(actual, expected, eps=1e-9):
    assert len(actual) == len(expected)
    for a, e in zip(actual, expected):
        assert a.equals(e, eps), f"{a!r} != {e!r}"


class TestTransformOperation:
    def test_mirror_about_y_axis(self):
        line = Line(V(1, 0), V(3, 2))
        (mirrored,) = TransformOperation().mirror([line], V(0, 0), V(0, 1))
        assert mirrored.start.equals(V(-1, 0), 1e-12)
        assert mirrored.end.equals(V(-3, 2), 1e-12)
        assert line.start == V(1, 0)

    def test_mirror_arc_flips_direction(self):
        arc = Arc(V(0, 0), 1.0, 0.0, math.pi / 2.0, ccw=True)
        (mirrored,) = TransformOperation().mirror([arc], V(0, 0), V(1, 0))
        assert mirrored.ccw is False
        assert mirrored.end_point.equals(V(0, -1), 1e-9)

    def test_mirror_without_direction(self):
        op = TransformOperation()
        assert op.mirror([Line(V(0, 0), V(1, 0))], V(0, 0), V(0, 0)) == []
        assert op.last_result.status == ResultStatus.NO_RESULT

    def test_rotate_quarter_turn(self):
        (rotated,) = TransformOperation().rotate([Line(V(1, 0), V(2, 0))], V(0, 0), math.pi / 2.0)
        assert rotated.start.equals(V(0, 1), 1e-12)
        assert rotated.end.equals(V(0, 2), 1e-12)

    def test_rotated_rectangle_becomes_polyline(self):
        rect = Rectangle(V(0, 0), V(2, 1))
        op = TransformOperation()

        (quarter,) = op.rotate([rect], V(0, 0), math.pi / 2.0)
        assert isinstance(quarter, Rectangle)
        assert quarter.width == pytest.approx(1.0)
        assert quarter.height == pytest.approx(2.0)

        (tilted,) = op.rotate([rect], V(0, 0), math.pi / 4.0)
        assert isinstance(tilted, Polyline)
        assert tilted.closed
        assert tilted.vertex_count == 4

    def test_scale_circle_about_base(self):
        (scaled,) = TransformOperation().scale([Circle(V(2, 1), 1.0)], V(1, 1), 2.0)
        assert scaled.center.equals(V(3, 1), 1e-12)
        assert scaled.radius == pytest.approx(2.0)

    def test_scale_by_zero_declines(self):
        assert TransformOperation().scale([Circle(V(0, 0), 1.0)], V(0, 0), 0.0) == []

    def test_move_and_copy(self):
        line = Line(V(0, 0), V(1, 0))
        op = TransformOperation()
        (moved,) = op.move([line], V(5, 5))
        assert moved.start == V(5, 5)
        assert line.start == V(0, 0)

        (copied,) = op.copy([line])
        assert copied is not line
        assert copied.id != line.id
        assert copied.start == line.start and copied.end == line.end

    def test_align_left_moves_selection_as_group(self):
        entities = [Line(V(2, 0), V(4, 1)), Circle(V(5, 5), 1.0)]
        aligned = TransformOperation().align(entities, Alignment.LEFT, V(0, 0))
        assert [e.bounding_box().min.x for e in aligned] == pytest.approx([0.0, 2.0])
        assert aligned[1].center.x == pytest.approx(3.0)
        assert aligned[1].center.y == pytest.approx(5.0)

    def test_align_center_uses_union_box(self):
        entities = [Rectangle(V(0, 0), V(2, 2)), Rectangle(V(8, 0), V(10, 2))]
        aligned = TransformOperation().align(entities, Alignment.CENTER, V(0, 0))
        assert [r.min_corner.x for r in aligned] == pytest.approx([-5.0, 3.0])

    def test_align_empty_selection(self):
        assert TransformOperation().align([], Alignment.LEFT) == []

    def test_align_accepts_string(self):
        aligned = TransformOperation().align([Circle(V(5, 5), 1.0)], "top", V(0, 10))
        assert aligned[0].bounding_box().max.y == pytest.approx(10.0)

    def test_distribute_equal_widths(self):
        rects = [Rectangle(V(10, 0), V(12, 1)), Rectangle(V(0, 0), V(2, 1)), Rectangle(V(3, 0), V(5, 1))]
        result = TransformOperation().distribute(rects, DistributeAxis.HORIZONTAL)
        assert [r.min_corner.x for r in result] == pytest.approx([0.0, 5.0, 10.0])

    def test_distribute_steps_centres_evenly(self):
        rects = [Rectangle(V(0, 0), V(1, 1)), Rectangle(V(10, 0), V(15, 1)), Rectangle(V(3, 0), V(4, 1))]
        result = TransformOperation().distribute(rects, DistributeAxis.HORIZONTAL)
        assert [r.center.x for r in result] == pytest.approx([0.5, 6.5, 12.5])
        assert result[2].min_corner.x == pytest.approx(10.0)

    def test_distribute_fixed_spacing(self):
        rects = [Rectangle(V(0, 0), V(1, 2)), Rectangle(V(0, 5), V(1, 7)), Rectangle(V(0, 20), V(1, 22))]
        result = TransformOperation().distribute(rects, "vertical", spacing=1.0)
        assert [r.min_corner.y for r in result] == pytest.approx([0.0, 3.0, 6.0])


class TestRectangularArray:
    def test_grid_positions(self):
        line = Line(V(0, 0), V(1, 0))
        result = ArrayOperation().rectangular([line], rows=2, cols=3, row_spacing=10, col_spacing=20)
        assert len(result) == 6
        assert_points([e.start for e in result],
                      [V(0, 0), V(20, 0), V(40, 0), V(0, 10), V(20, 10), V(40, 10)])
        assert result[0] is not line

    def test_row_angle_tilts_rows(self):
        circle = Circle(V(0, 0), 1.0)
        result = ArrayOperation().rectangular([circle], 2, 1, 10.0, 5.0, row_angle=math.radians(-30.0))
        assert result[1].center.equals(V(5.0, 10.0 * math.sin(math.radians(60.0))), 1e-9)

    @pytest.mark.parametrize("rows,cols", [(0, 3), (2, 0)])
    def test_invalid_size_returns_copies(self, rows, cols):
        op = ArrayOperation()
        result = op.rectangular([Line(V(0, 0), V(1, 0))], rows, cols, 1.0, 1.0)
        assert len(result) == 1
        assert op.last_result.status == ResultStatus.NO_RESULT

    def test_grid_with_origin(self):
        result = ArrayOperation().grid([Circle(V(0, 0), 1.0)], 2, 2, 5.0, origin=V(100, 100))
        assert_points([c.center for c in result], [V(101, 101), V(106, 101), V(101, 106), V(106, 106)])


class TestPolarArray:
    def test_full_circle(self):
        result = ArrayOperation().polar([Circle(V(10, 0), 1.0)], V(0, 0), 4)
        assert_points([c.center for c in result], [V(10, 0), V(0, 10), V(-10, 0), V(0, -10)])

    def test_partial_arc_leaves_end_free(self):
        result = ArrayOperation().polar([Circle(V(10, 0), 1.0)], V(0, 0), 4, math.pi)
        diagonal = 10.0 / math.sqrt(2.0)
        assert_points([c.center for c in result],
                      [V(10, 0), V(diagonal, diagonal), V(0, 10), V(-diagonal, diagonal)])

    def test_without_rotation_keeps_orientation(self):
        line = Line(V(9, 0), V(11, 0))
        result = ArrayOperation().polar([line], V(0, 0), 2, rotate_items=False)
        assert result[1].start.equals(V(-11, 0), 1e-9)
        assert result[1].end.equals(V(-9, 0), 1e-9)

    def test_without_rotation_each_entity_keeps_its_radius(self):
        entities = [Circle(V(10, 0), 1.0), Line(V(4, 0), V(6, 0))]
        result = ArrayOperation().polar(entities, V(0, 0), 4, rotate_items=False)
        assert len(result) == 8
        assert result[2].center.equals(V(0, 10), 1e-9)
        assert result[3].start.equals(V(-1, 5), 1e-9)
        assert result[3].end.equals(V(1, 5), 1e-9)
        assert result[5].start.equals(V(-6, 0), 1e-9)

    def test_rotated_rectangles(self):
        rect = Rectangle(V(9, -1), V(11, 1))
        assert all(isinstance(e, Rectangle) for e in ArrayOperation().circular([rect], V(0, 0), 4))
        eight = ArrayOperation().circular([rect], V(0, 0), 8)
        assert isinstance(eight[1], Polyline)

    def test_zero_count(self):
        assert len(ArrayOperation().polar([Circle(V(1, 0), 0.5)], V(0, 0), 0)) == 1


class TestPathArray:
    def test_straight_path(self):
        result = ArrayOperation().path([Circle(V(0, 0), 0.5)], [V(0, 0), V(10, 0)], 3)
        assert_points(centers(result), [V(0, 0), V(5, 0), V(10, 0)])

    def test_align_to_tangent(self):
        path = Polyline([V(0, 0), V(10, 0), V(10, 10)])
        marker = Line(V(-1, 0), V(1, 0))
        result = ArrayOperation().path([marker], path, 3)
        assert result[1].start.equals(V(10, -1), 1e-9)
        assert result[1].end.equals(V(10, 1), 1e-9)
        assert result[2].start.equals(V(10, 9), 1e-9)

    def test_without_alignment(self):
        path = Polyline([V(0, 0), V(10, 0), V(10, 10)])
        result = ArrayOperation().path([Line(V(-1, 0), V(1, 0))], path, 3, align_to_path=False)
        assert result[2].start.equals(V(9, 10), 1e-9)

    def test_closed_path_has_no_duplicate_start(self):
        square = Polyline([V(0, 0), V(4, 0), V(4, 4), V(0, 4)], closed=True)
        result = ArrayOperation().path([Circle(V(0, 0), 0.1)], square, 4)
        assert_points(centers(result), [V(0, 0), V(4, 0), V(4, 4), V(0, 4)])

    @pytest.mark.parametrize("path,count", [([V(0, 0)], 3), ([V(0, 0), V(1, 0)], 1)])
    def test_invalid_path(self, path, count):
        op = ArrayOperation()
        assert len(op.path([Circle(V(0, 0), 1.0)], path, count)) == 1
        assert op.last_result.status == ResultStatus.NO_RESULT
