"""
Vector2 Tests - Wertsemantik, Arithmetik und Winkel.
"""

import math

import pytest

from drafting.vector import Vector2


class TestVector2Arithmetic:
    """Tests für Operatoren und Metrik."""

    def test_add_sub_neg(self):
        a = Vector2(1.0, 2.0)
        b = Vector2(3.0, -1.0)
        assert a + b == Vector2(4.0, 1.0)
        assert a - b == Vector2(-2.0, 3.0)
        assert -a == Vector2(-1.0, -2.0)

    def test_scalar_mul_div(self):
        v = Vector2(2.0, -4.0)
        assert v * 0.5 == Vector2(1.0, -2.0)
        assert 2 * v == Vector2(4.0, -8.0)
        assert v / 2.0 == Vector2(1.0, -2.0)

    def test_length_and_normalized(self):
        v = Vector2(3.0, 4.0)
        assert v.length == 5.0
        assert v.length_squared == 25.0
        n = v.normalized()
        assert math.isclose(n.length, 1.0, abs_tol=1e-12)
        assert n.equals(Vector2(0.6, 0.8), 1e-12)

    def test_zero_vector_normalizes_to_zero(self):
        assert Vector2.zero().normalized() == Vector2(0.0, 0.0)

    def test_dot_cross_perpendicular(self):
        a = Vector2(1.0, 0.0)
        b = Vector2(0.0, 1.0)
        assert a.dot(b) == 0.0
        assert a.cross(b) == 1.0
        assert b.cross(a) == -1.0
        assert a.perpendicular() == Vector2(0.0, 1.0)

    def test_values_are_immutable(self):
        v = Vector2(1.0, 1.0)
        with pytest.raises(AttributeError):
            v.x = 5.0

    def test_ints_become_floats(self):
        v = Vector2(1, 2)
        assert isinstance(v.x, float)
        assert v.as_tuple() == (1.0, 2.0)
        assert tuple(v) == (1.0, 2.0)


class TestVector2Angles:
    """Tests für Winkel, Rotation und Interpolation."""

    def test_angle_and_from_angle(self):
        v = Vector2.from_angle(math.pi / 2.0, 2.0)
        assert v.equals(Vector2(0.0, 2.0), 1e-12)
        assert math.isclose(v.angle(), math.pi / 2.0, abs_tol=1e-12)

    def test_angle_to_is_unsigned(self):
        a = Vector2(1.0, 0.0)
        assert math.isclose(a.angle_to(Vector2(0.0, -1.0)), math.pi / 2.0, abs_tol=1e-12)
        assert math.isclose(a.angle_to(Vector2(-1.0, 0.0)), math.pi, abs_tol=1e-12)

    def test_rotated_around_origin_point(self):
        p = Vector2(2.0, 1.0)
        rotated = p.rotated(math.pi / 2.0, Vector2(1.0, 1.0))
        assert rotated.equals(Vector2(1.0, 2.0), 1e-12)

    def test_lerp_and_distance(self):
        a = Vector2(0.0, 0.0)
        b = Vector2(10.0, 0.0)
        assert a.lerp(b, 0.25) == Vector2(2.5, 0.0)
        assert a.distance_to(b) == 10.0
        assert a.distance_squared_to(b) == 100.0

    def test_from_points_and_tuple(self):
        assert Vector2.from_points(Vector2(1.0, 1.0), Vector2(4.0, 5.0)) == Vector2(3.0, 4.0)
        assert Vector2.from_tuple((7, 8)) == Vector2(7.0, 8.0)
