"""
BoundaryDetector Tests - Raum-Erkennung, Klassifizierung und Label-Übernahme.
"""

import pytest

from drafting.boundary import (
    BoundaryDetector, ClassificationRules, DetectedBoundary, RoomLabel, shoelace_area,
)
from drafting.geometry import Arc, Circle, Line, Polyline, Rectangle
from drafting.vector import Vector2


def V(x, y):
    return Vector2(float(x), float(y))


def square_lines(x0, y0, size):
    corners = [V(x0, y0), V(x0 + size, y0), V(x0 + size, y0 + size), V(x0, y0 + size)]
    return [Line(corners[i], corners[(i + 1) % 4]) for i in range(4)]


@pytest.fixture
def floor_plan():
    """Vier Räume: 300, 144, 42 und 25 Flächeneinheiten."""
    return [
        Rectangle(V(0, 0), V(20, 15)),
        Rectangle(V(20, 0), V(32, 12)),
        Polyline([V(32, 0), V(38, 0), V(38, 7), V(32, 7)], closed=True),
        *square_lines(0, 15, 5),
    ]


class TestDetect:
    def test_unit_square_from_lines(self):
        rooms = BoundaryDetector().detect(square_lines(0, 0, 1))
        assert len(rooms) == 1
        assert rooms[0].area == pytest.approx(1.0)
        assert len(rooms[0].vertices) == 4

    def test_reversed_segments_are_followed(self):
        lines = [
            Line(V(0, 0), V(10, 0)),
            Line(V(10, 10), V(10, 0)),
            Line(V(0, 10), V(10, 10)),
            Line(V(0, 0), V(0, 10)),
        ]
        rooms = BoundaryDetector().detect(lines)
        assert len(rooms) == 1
        assert rooms[0].area == pytest.approx(100.0)
        assert rooms[0].vertices == [V(0, 0), V(10, 0), V(10, 10), V(0, 10)]
        # Eingabe bleibt unverändert
        assert lines[1].start == V(10, 10)
        assert lines[2].end == V(10, 10)

    def test_detect_is_idempotent(self, floor_plan):
        detector = BoundaryDetector()
        first = detector.detect(floor_plan)
        second = detector.detect(floor_plan)
        assert [b.vertices for b in first] == [b.vertices for b in second]
        assert [b.area for b in first] == [b.area for b in second]

    def test_mixed_plan(self, floor_plan):
        rooms = BoundaryDetector().detect(floor_plan)
        assert [r.area for r in rooms] == pytest.approx([300.0, 144.0, 42.0, 25.0])
        assert all(r.label == RoomLabel.UNDEFINED for r in rooms)

    def test_small_gaps_within_tolerance_close(self):
        lines = square_lines(0, 0, 10)
        lines[3] = Line(V(0, 10), V(0.005, 0.004))
        assert len(BoundaryDetector().detect(lines)) == 1

    def test_open_chain(self):
        lines = square_lines(0, 0, 10)[:3]
        assert BoundaryDetector().detect(lines) == []

    def test_gap_too_wide(self):
        lines = square_lines(0, 0, 10)
        lines[3] = Line(V(0, 10), V(0, 0.5))
        assert BoundaryDetector().detect(lines) == []

    def test_arcs_and_circles_are_not_walls(self):
        entities = square_lines(0, 0, 4) + [Circle(V(2, 2), 1.0), Arc(V(0, 0), 4.0, 0.0, 1.0)]
        detector = BoundaryDetector()
        assert len(detector.segments_from(entities)) == 4
        assert len(detector.detect(entities)) == 1

    def test_tiny_loop_is_dropped(self):
        triangle = Polyline([V(0, 0), V(0.1, 0), V(0, 0.1)], closed=True)
        assert BoundaryDetector().detect([triangle]) == []

    def test_empty_input(self):
        assert BoundaryDetector().detect([]) == []


class TestDetectedBoundary:
    def test_geometry_helpers(self):
        (room,) = BoundaryDetector().detect(square_lines(0, 0, 1))
        assert room.centroid.equals(V(0.5, 0.5), 1e-12)
        assert room.perimeter == pytest.approx(4.0)
        assert room.bounding_box.max == V(1, 1)
        assert room.contains_point(V(0.5, 0.5))
        assert room.contains_point(V(1.0, 0.5))
        assert not room.contains_point(V(2.0, 0.5))

    def test_shoelace_ignores_orientation(self):
        ccw = [V(0, 0), V(4, 0), V(4, 3)]
        assert shoelace_area(ccw) == pytest.approx(6.0)
        assert shoelace_area(list(reversed(ccw))) == pytest.approx(6.0)
        assert shoelace_area(ccw[:2]) == 0.0


class TestClassify:
    def test_labels_by_area(self, floor_plan):
        detector = BoundaryDetector()
        rooms = detector.classify(detector.detect(floor_plan))
        assert [r.label for r in rooms] == [
            RoomLabel.LIVING_ROOM, RoomLabel.BEDROOM, RoomLabel.BATHROOM, RoomLabel.CLOSET,
        ]

    def test_returns_sorted_copies(self):
        small = DetectedBoundary([V(0, 0), V(1, 0), V(1, 1)], 10.0)
        large = DetectedBoundary([V(0, 0), V(9, 0), V(9, 9)], 400.0)
        rooms = BoundaryDetector().classify([small, large])
        assert [r.area for r in rooms] == [400.0, 10.0]
        assert small.label == RoomLabel.UNDEFINED
        assert rooms[1] is not small

    def test_bedroom_range(self):
        rooms = [DetectedBoundary([V(0, 0), V(1, 0), V(1, 1)], area)
                 for area in (1000.0, 300.0, 100.0, 99.0)]
        labels = [r.label for r in BoundaryDetector().classify(rooms)]
        assert labels == [RoomLabel.LIVING_ROOM, RoomLabel.UNDEFINED, RoomLabel.BEDROOM, RoomLabel.UNDEFINED]

    def test_only_three_secondary_slots(self):
        rooms = [DetectedBoundary([V(0, 0), V(1, 0), V(1, 1)], area)
                 for area in (500.0, 200.0, 190.0, 180.0, 170.0)]
        labels = [r.label for r in BoundaryDetector().classify(rooms)]
        assert labels[1:4] == [RoomLabel.BEDROOM] * 3
        assert labels[4] == RoomLabel.UNDEFINED

    def test_locked_labels_are_kept(self):
        locked = DetectedBoundary([V(0, 0), V(1, 0), V(1, 1)], 500.0,
                                  label=RoomLabel.BATHROOM, label_locked=True)
        tiny = DetectedBoundary([V(0, 0), V(1, 0), V(1, 1)], 20.0,
                                label=RoomLabel.UNDEFINED, label_locked=True)
        rooms = BoundaryDetector().classify([tiny, locked])
        assert rooms[0].label == RoomLabel.BATHROOM
        assert rooms[1].label == RoomLabel.UNDEFINED

    def test_custom_rules(self):
        rooms = [DetectedBoundary([V(0, 0), V(1, 0), V(1, 1)], area) for area in (100.0, 40.0)]
        rules = ClassificationRules(closet_max=45.0)
        labels = [r.label for r in BoundaryDetector().classify(rooms, rules)]
        assert labels == [RoomLabel.LIVING_ROOM, RoomLabel.CLOSET]


class TestUpdate:
    def test_labels_follow_edited_rooms(self, floor_plan):
        detector = BoundaryDetector()
        previous = detector.classify(detector.detect(floor_plan))
        previous[1].name = "Kinderzimmer"
        previous[1].label_locked = True

        edited = list(floor_plan)
        edited[1] = Rectangle(V(20, 0), V(33, 12))
        edited[2] = Polyline([V(33, 0), V(38, 0), V(38, 7), V(33, 7)], closed=True)
        rooms = detector.update(edited, previous)

        bedroom = next(r for r in rooms if r.area == pytest.approx(156.0))
        assert bedroom.label == RoomLabel.BEDROOM
        assert bedroom.name == "Kinderzimmer"
        assert bedroom.label_locked

    def test_new_room_without_predecessor(self):
        detector = BoundaryDetector()
        previous = detector.classify(detector.detect(square_lines(0, 0, 10)))
        rooms = detector.update(square_lines(50, 50, 10), previous)
        assert rooms[0].label == RoomLabel.UNDEFINED
        assert rooms[0].name is None
