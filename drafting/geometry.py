"""
PlanCad Drafting - Geometrie-Entities
=====================================

Die fünf Entity-Varianten des Zeichenkerns: Line, Arc, Circle, Polyline,
Rectangle. Alle teilen dieselben Abfragen (Bounding Box, nächster Punkt,
Enthaltensein, Rechteck-Test, Snap-Punkte, Transformation, Klonen).

Die Bounding Box wird pro Entity gecacht. Jeder Mutator setzt das
Dirty-Flag, der nächste Lesezugriff berechnet neu.

Verwendung:
    from drafting.geometry import Line, Circle
    from drafting.vector import Vector2

    line = Line(Vector2(0, 0), Vector2(10, 0))
    box = line.bounding_box()
    line.end = Vector2(20, 0)   # Box wird beim nächsten Zugriff neu berechnet
"""

import math
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from config.tolerances import Tolerances
from .vector import Vector2

if TYPE_CHECKING:
    from .affine import AffineTransform


TWO_PI = 2.0 * math.pi


class InvalidGeometryError(ValueError):
    """Entity-Invariante verletzt (Radius <= 0, Polyline mit < 2 Punkten)."""
    pass


class UnsupportedOperationError(Exception):
    """
    Operation mit einer Entity-Variante außerhalb ihrer Fähigkeiten
    (z.B. Trim auf einem Circle). Aufrufer-Fehler, kein Geometrie-Sonderfall.
    """
    pass


class EntityType(Enum):
    """Entity-Varianten"""
    LINE = auto()
    ARC = auto()
    CIRCLE = auto()
    POLYLINE = auto()
    RECTANGLE = auto()


class SnapType(Enum):
    """Snap-Punkt-Arten für den Snapping-Kollaborator"""
    ENDPOINT = "endpoint"
    MIDPOINT = "midpoint"
    CENTER = "center"
    QUADRANT = "quadrant"


ALL_SNAP_TYPES = frozenset(SnapType)


@dataclass(frozen=True)
class SnapPoint:
    point: Vector2
    type: SnapType
    entity: 'Entity'


@dataclass(frozen=True)
class BoundingBox:
    """Achsparallele Box {min, max}."""
    min: Vector2
    max: Vector2

    @classmethod
    def from_points(cls, points: Iterable[Vector2]) -> 'BoundingBox':
        pts = list(points)
        if not pts:
            raise ValueError("BoundingBox braucht mindestens einen Punkt")
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        return cls(Vector2(min(xs), min(ys)), Vector2(max(xs), max(ys)))

    @classmethod
    def union_all(cls, boxes: Iterable['BoundingBox']) -> Optional['BoundingBox']:
        result = None
        for box in boxes:
            result = box if result is None else result.union(box)
        return result

    @property
    def width(self) -> float:
        return self.max.x - self.min.x

    @property
    def height(self) -> float:
        return self.max.y - self.min.y

    @property
    def size(self) -> Vector2:
        return Vector2(self.width, self.height)

    @property
    def center(self) -> Vector2:
        return Vector2((self.min.x + self.max.x) / 2.0, (self.min.y + self.max.y) / 2.0)

    def intersects(self, other: 'BoundingBox') -> bool:
        """Geschlossene Intervalle: Berührung zählt als Schnitt."""
        return not (other.min.x > self.max.x or other.max.x < self.min.x or
                    other.min.y > self.max.y or other.max.y < self.min.y)

    def contains(self, other: 'BoundingBox') -> bool:
        return (self.min.x <= other.min.x and other.max.x <= self.max.x and
                self.min.y <= other.min.y and other.max.y <= self.max.y)

    def contains_point(self, point: Vector2) -> bool:
        return self.min.x <= point.x <= self.max.x and self.min.y <= point.y <= self.max.y

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        return BoundingBox(
            Vector2(min(self.min.x, other.min.x), min(self.min.y, other.min.y)),
            Vector2(max(self.max.x, other.max.x), max(self.max.y, other.max.y)),
        )

    def expanded(self, margin: float) -> 'BoundingBox':
        return BoundingBox(
            Vector2(self.min.x - margin, self.min.y - margin),
            Vector2(self.max.x + margin, self.max.y + margin),
        )

    def closest_point(self, point: Vector2) -> Vector2:
        return Vector2(min(max(point.x, self.min.x), self.max.x),
                       min(max(point.y, self.min.y), self.max.y))


# =============================================================================
# Hilfsfunktionen
# =============================================================================

def _new_id() -> str:
    return str(uuid.uuid4())[:8]


def _normalize_angle(angle: float) -> float:
    """Winkel nach [0, 2pi)."""
    result = math.fmod(angle, TWO_PI)
    if result < 0.0:
        result += TWO_PI
    return result


def _closest_on_segment(point: Vector2, start: Vector2, end: Vector2) -> Vector2:
    seg = end - start
    length_sq = seg.length_squared
    if length_sq == 0.0:
        return start
    t = max(0.0, min(1.0, (point - start).dot(seg) / length_sq))
    return start + seg * t


def _segments_cross(p1: Vector2, p2: Vector2, p3: Vector2, p4: Vector2, eps: float = 1e-4) -> bool:
    """Schneiden sich zwei Strecken (inklusive Berührung)?"""
    r = p2 - p1
    s = p4 - p3
    denom = r.cross(s)
    if abs(denom) < 1e-12:
        return False
    qp = p3 - p1
    t = qp.cross(s) / denom
    u = qp.cross(r) / denom
    return -eps <= t <= 1.0 + eps and -eps <= u <= 1.0 + eps


def _segment_circle_points(start: Vector2, end: Vector2, center: Vector2, radius: float) -> List[Vector2]:
    """Schnittpunkte einer Strecke mit einem Vollkreis (für Rechteck-Tests)."""
    seg = end - start
    a = seg.length_squared
    if a == 0.0:
        return []
    f = start - center
    b = 2.0 * f.dot(seg)
    c = f.length_squared - radius * radius
    disc = b * b - 4.0 * a * c
    if disc < 0.0:
        return []
    root = math.sqrt(disc)
    points = []
    for t in ((-b - root) / (2.0 * a), (-b + root) / (2.0 * a)):
        if 0.0 <= t <= 1.0:
            points.append(start + seg * t)
    return points


def _rect_edges(rect_min: Vector2, rect_max: Vector2) -> List[Tuple[Vector2, Vector2]]:
    corners = [rect_min, Vector2(rect_max.x, rect_min.y), rect_max, Vector2(rect_min.x, rect_max.y)]
    return [(corners[i], corners[(i + 1) % 4]) for i in range(4)]


def _polyline_intersects_rect(points: Sequence[Vector2], closed: bool,
                              rect_min: Vector2, rect_max: Vector2) -> bool:
    box = BoundingBox(rect_min, rect_max)
    if any(box.contains_point(p) for p in points):
        return True
    count = len(points)
    edge_count = count if closed else count - 1
    for i in range(edge_count):
        a, b = points[i], points[(i + 1) % count]
        for e1, e2 in _rect_edges(rect_min, rect_max):
            if _segments_cross(a, b, e1, e2):
                return True
    return False


def _point_in_ring(point: Vector2, ring: Sequence[Vector2]) -> bool:
    """Ray-Casting (gerade/ungerade Regel)."""
    inside = False
    count = len(ring)
    j = count - 1
    for i in range(count):
        pi, pj = ring[i], ring[j]
        if (pi.y > point.y) != (pj.y > point.y):
            x_cross = (pj.x - pi.x) * (point.y - pi.y) / (pj.y - pi.y) + pi.x
            if point.x < x_cross:
                inside = not inside
        j = i
    return inside


def _validate_radius(radius: float) -> float:
    radius = float(radius)
    if not math.isfinite(radius) or radius <= 0.0:
        raise InvalidGeometryError(f"Radius muss > 0 sein, nicht {radius}")
    return radius


# =============================================================================
# Entity-Basis
# =============================================================================

class Entity(ABC):
    """
    Abstrakte Basis aller Entities.

    Jede Variante besitzt ihre Geometrie selbst; Entities sind unabhängige
    Werte ohne Eltern/Kind-Graph.
    """

    entity_type: EntityType

    def __init__(self, layer: str = "0"):
        self.id = _new_id()
        self.layer = layer
        self._bbox: Optional[BoundingBox] = None
        self._bbox_dirty = True

    def bounding_box(self) -> BoundingBox:
        """Gecachte Bounding Box (nach Mutation neu berechnet)."""
        if self._bbox_dirty or self._bbox is None:
            self._bbox = self._compute_bounding_box()
            self._bbox_dirty = False
        return self._bbox

    def _invalidate(self) -> None:
        self._bbox_dirty = True

    @abstractmethod
    def _compute_bounding_box(self) -> BoundingBox:
        pass

    @abstractmethod
    def nearest_point(self, point: Vector2) -> Vector2:
        pass

    def distance_to(self, point: Vector2) -> float:
        return point.distance_to(self.nearest_point(point))

    def contains_point(self, point: Vector2, tolerance: float = Tolerances.PICK_POINT) -> bool:
        """Liegt der Punkt auf der Kontur (innerhalb tolerance)?"""
        return self.distance_to(point) <= tolerance

    @abstractmethod
    def intersects_rect(self, rect_min: Vector2, rect_max: Vector2) -> bool:
        """Auswahl-Test gegen ein achsparalleles Rechteck."""
        pass

    @abstractmethod
    def snap_points(self, kinds: Iterable[SnapType] = ALL_SNAP_TYPES) -> List[SnapPoint]:
        pass

    @abstractmethod
    def transform(self, matrix: 'AffineTransform') -> None:
        """Wendet die Matrix in-place an (invalidiert die Bounding Box)."""
        pass

    @abstractmethod
    def clone(self) -> 'Entity':
        """Kopie mit neuer ID und gleichem Layer."""
        pass


# =============================================================================
# Line
# =============================================================================

class Line(Entity):
    """Strecke zwischen zwei Punkten"""

    entity_type = EntityType.LINE

    def __init__(self, start: Vector2, end: Vector2, layer: str = "0"):
        super().__init__(layer)
        self._start = start
        self._end = end

    @property
    def start(self) -> Vector2:
        return self._start

    @start.setter
    def start(self, value: Vector2):
        self._start = value
        self._invalidate()

    @property
    def end(self) -> Vector2:
        return self._end

    @end.setter
    def end(self, value: Vector2):
        self._end = value
        self._invalidate()

    @property
    def length(self) -> float:
        return self._start.distance_to(self._end)

    @property
    def direction(self) -> Vector2:
        """Normierter Richtungsvektor; (1, 0) bei Länge 0."""
        if self.length < 1e-10:
            return Vector2(1.0, 0.0)
        return (self._end - self._start).normalized()

    @property
    def midpoint(self) -> Vector2:
        return self._start.lerp(self._end, 0.5)

    @property
    def angle(self) -> float:
        """Winkel zur X-Achse in Radians"""
        return (self._end - self._start).angle()

    def point_at(self, t: float) -> Vector2:
        return self._start.lerp(self._end, t)

    def parameter_of(self, point: Vector2) -> float:
        """Projektions-Parameter t (nicht geklemmt)."""
        seg = self._end - self._start
        length_sq = seg.length_squared
        if length_sq == 0.0:
            return 0.0
        return (point - self._start).dot(seg) / length_sq

    def reversed(self) -> 'Line':
        return Line(self._end, self._start, self.layer)

    def _compute_bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points((self._start, self._end))

    def nearest_point(self, point: Vector2) -> Vector2:
        return _closest_on_segment(point, self._start, self._end)

    def intersects_rect(self, rect_min: Vector2, rect_max: Vector2) -> bool:
        return _polyline_intersects_rect((self._start, self._end), False, rect_min, rect_max)

    def snap_points(self, kinds: Iterable[SnapType] = ALL_SNAP_TYPES) -> List[SnapPoint]:
        kinds = set(kinds)
        points = []
        if SnapType.ENDPOINT in kinds:
            points.append(SnapPoint(self._start, SnapType.ENDPOINT, self))
            points.append(SnapPoint(self._end, SnapType.ENDPOINT, self))
        if SnapType.MIDPOINT in kinds:
            points.append(SnapPoint(self.midpoint, SnapType.MIDPOINT, self))
        return points

    def transform(self, matrix: 'AffineTransform') -> None:
        self._start = matrix.apply(self._start)
        self._end = matrix.apply(self._end)
        self._invalidate()

    def clone(self) -> 'Line':
        return Line(self._start, self._end, self.layer)

    def __repr__(self):
        return f"Line({self._start!r} -> {self._end!r})"


# =============================================================================
# Arc
# =============================================================================

class Arc(Entity):
    """
    Kreisbogen: Mittelpunkt, Radius, Start- und Endwinkel (Radians).

    ccw=True läuft von start_angle gegen den Uhrzeigersinn nach end_angle.
    """

    entity_type = EntityType.ARC

    def __init__(self, center: Vector2, radius: float, start_angle: float,
                 end_angle: float, ccw: bool = True, layer: str = "0"):
        super().__init__(layer)
        self._center = center
        self._radius = _validate_radius(radius)
        self._start_angle = float(start_angle)
        self._end_angle = float(end_angle)
        self._ccw = bool(ccw)

    @classmethod
    def from_three_points(cls, p1: Vector2, p2: Vector2, p3: Vector2,
                          layer: str = "0") -> Optional['Arc']:
        """
        Bogen durch drei Punkte (Start, Zwischenpunkt, Ende).

        Returns:
            None wenn die Punkte kollinear sind
        """
        mid12 = p1.lerp(p2, 0.5)
        mid23 = p2.lerp(p3, 0.5)
        perp12 = (p2 - p1).perpendicular()
        perp23 = (p3 - p2).perpendicular()

        denom = perp12.cross(perp23)
        if abs(denom) < 1e-10:
            return None
        t = (mid23 - mid12).cross(perp23) / denom
        center = mid12 + perp12 * t

        radius = center.distance_to(p1)
        if radius <= 0.0:
            return None
        ccw = (p2 - p1).cross(p3 - p1) > 0.0
        return cls(center, radius, (p1 - center).angle(), (p3 - center).angle(), ccw, layer)

    @property
    def center(self) -> Vector2:
        return self._center

    @center.setter
    def center(self, value: Vector2):
        self._center = value
        self._invalidate()

    @property
    def radius(self) -> float:
        return self._radius

    @radius.setter
    def radius(self, value: float):
        self._radius = _validate_radius(value)
        self._invalidate()

    @property
    def start_angle(self) -> float:
        return self._start_angle

    @start_angle.setter
    def start_angle(self, value: float):
        self._start_angle = float(value)
        self._invalidate()

    @property
    def end_angle(self) -> float:
        return self._end_angle

    @end_angle.setter
    def end_angle(self, value: float):
        self._end_angle = float(value)
        self._invalidate()

    @property
    def ccw(self) -> bool:
        return self._ccw

    @ccw.setter
    def ccw(self, value: bool):
        self._ccw = bool(value)
        self._invalidate()

    @property
    def sweep_angle(self) -> float:
        """Überstrichener Winkel in (0, 2pi]; gleiche Winkel = Vollkreis."""
        if self._ccw:
            sweep = _normalize_angle(self._end_angle - self._start_angle)
        else:
            sweep = _normalize_angle(self._start_angle - self._end_angle)
        return sweep if sweep > 0.0 else TWO_PI

    @property
    def arc_length(self) -> float:
        return self._radius * self.sweep_angle

    def point_at_angle(self, angle: float) -> Vector2:
        return self._center + Vector2.from_angle(angle, self._radius)

    def point_at(self, t: float) -> Vector2:
        sign = 1.0 if self._ccw else -1.0
        return self.point_at_angle(self._start_angle + sign * self.sweep_angle * t)

    @property
    def start_point(self) -> Vector2:
        return self.point_at_angle(self._start_angle)

    @property
    def end_point(self) -> Vector2:
        return self.point_at_angle(self._end_angle)

    @property
    def mid_point(self) -> Vector2:
        return self.point_at(0.5)

    def contains_angle(self, angle: float, eps: float = 1e-9) -> bool:
        """Liegt der Winkel auf dem Bogen?"""
        if self._ccw:
            offset = _normalize_angle(angle - self._start_angle)
        else:
            offset = _normalize_angle(self._start_angle - angle)
        return offset <= self.sweep_angle + eps or offset >= TWO_PI - eps

    def _compute_bounding_box(self) -> BoundingBox:
        points = [self.start_point, self.end_point]
        # Kardinale Extrempunkte, die der Bogen überstreicht
        for angle in (0.0, math.pi / 2.0, math.pi, 3.0 * math.pi / 2.0):
            if self.contains_angle(angle):
                points.append(self.point_at_angle(angle))
        return BoundingBox.from_points(points)

    def nearest_point(self, point: Vector2) -> Vector2:
        offset = point - self._center
        if offset.length == 0.0:
            return self.start_point
        angle = offset.angle()
        if self.contains_angle(angle):
            return self._center + offset.normalized() * self._radius
        start, end = self.start_point, self.end_point
        return start if point.distance_to(start) <= point.distance_to(end) else end

    def intersects_rect(self, rect_min: Vector2, rect_max: Vector2) -> bool:
        box = BoundingBox(rect_min, rect_max)
        if box.contains_point(self.start_point) or box.contains_point(self.end_point):
            return True
        for e1, e2 in _rect_edges(rect_min, rect_max):
            for hit in _segment_circle_points(e1, e2, self._center, self._radius):
                if self.contains_angle((hit - self._center).angle()):
                    return True
        return False

    def snap_points(self, kinds: Iterable[SnapType] = ALL_SNAP_TYPES) -> List[SnapPoint]:
        kinds = set(kinds)
        points = []
        if SnapType.ENDPOINT in kinds:
            points.append(SnapPoint(self.start_point, SnapType.ENDPOINT, self))
            points.append(SnapPoint(self.end_point, SnapType.ENDPOINT, self))
        if SnapType.MIDPOINT in kinds:
            points.append(SnapPoint(self.mid_point, SnapType.MIDPOINT, self))
        if SnapType.CENTER in kinds:
            points.append(SnapPoint(self._center, SnapType.CENTER, self))
        return points

    def transform(self, matrix: 'AffineTransform') -> None:
        start = matrix.apply(self.start_point)
        end = matrix.apply(self.end_point)
        self._center = matrix.apply(self._center)
        self._radius = _validate_radius(self._radius * matrix.mean_scale)
        self._start_angle = (start - self._center).angle()
        self._end_angle = (end - self._center).angle()
        # Spiegelung kehrt den Umlaufsinn um
        if matrix.is_reflection:
            self._ccw = not self._ccw
        self._invalidate()

    def clone(self) -> 'Arc':
        return Arc(self._center, self._radius, self._start_angle, self._end_angle, self._ccw, self.layer)

    def __repr__(self):
        return (f"Arc(c={self._center!r}, r={self._radius:.4g}, "
                f"{math.degrees(self._start_angle):.1f}°..{math.degrees(self._end_angle):.1f}°, "
                f"{'ccw' if self._ccw else 'cw'})")


# =============================================================================
# Circle
# =============================================================================

class Circle(Entity):
    """Vollkreis"""

    entity_type = EntityType.CIRCLE

    def __init__(self, center: Vector2, radius: float, layer: str = "0"):
        super().__init__(layer)
        self._center = center
        self._radius = _validate_radius(radius)

    @property
    def center(self) -> Vector2:
        return self._center

    @center.setter
    def center(self, value: Vector2):
        self._center = value
        self._invalidate()

    @property
    def radius(self) -> float:
        return self._radius

    @radius.setter
    def radius(self, value: float):
        self._radius = _validate_radius(value)
        self._invalidate()

    @property
    def diameter(self) -> float:
        return 2.0 * self._radius

    @property
    def circumference(self) -> float:
        return TWO_PI * self._radius

    @property
    def area(self) -> float:
        return math.pi * self._radius * self._radius

    def point_at_angle(self, angle: float) -> Vector2:
        return self._center + Vector2.from_angle(angle, self._radius)

    def _compute_bounding_box(self) -> BoundingBox:
        r = Vector2(self._radius, self._radius)
        return BoundingBox(self._center - r, self._center + r)

    def nearest_point(self, point: Vector2) -> Vector2:
        offset = point - self._center
        if offset.length == 0.0:
            return self._center + Vector2(self._radius, 0.0)
        return self._center + offset.normalized() * self._radius

    def intersects_rect(self, rect_min: Vector2, rect_max: Vector2) -> bool:
        # Kontur trifft das Rechteck: nächster Rechteckpunkt innen, fernste Ecke außen
        box = BoundingBox(rect_min, rect_max)
        nearest = box.closest_point(self._center).distance_to(self._center)
        farthest = max(self._center.distance_to(c) for c in (
            rect_min, rect_max, Vector2(rect_min.x, rect_max.y), Vector2(rect_max.x, rect_min.y)))
        return nearest <= self._radius <= farthest

    def snap_points(self, kinds: Iterable[SnapType] = ALL_SNAP_TYPES) -> List[SnapPoint]:
        kinds = set(kinds)
        points = []
        if SnapType.CENTER in kinds:
            points.append(SnapPoint(self._center, SnapType.CENTER, self))
        if SnapType.QUADRANT in kinds:
            for angle in (0.0, math.pi / 2.0, math.pi, 3.0 * math.pi / 2.0):
                points.append(SnapPoint(self.point_at_angle(angle), SnapType.QUADRANT, self))
        return points

    def transform(self, matrix: 'AffineTransform') -> None:
        self._center = matrix.apply(self._center)
        self._radius = _validate_radius(self._radius * matrix.mean_scale)
        self._invalidate()

    def clone(self) -> 'Circle':
        return Circle(self._center, self._radius, self.layer)

    def __repr__(self):
        return f"Circle(c={self._center!r}, r={self._radius:.4g})"


# =============================================================================
# Polyline
# =============================================================================

class Polyline(Entity):
    """Offene oder geschlossene Punktfolge (mindestens 2 Punkte)"""

    entity_type = EntityType.POLYLINE

    MIN_VERTICES = 2

    def __init__(self, vertices: Iterable[Vector2], closed: bool = False, layer: str = "0"):
        super().__init__(layer)
        self._vertices: List[Vector2] = list(vertices)
        if len(self._vertices) < self.MIN_VERTICES:
            raise InvalidGeometryError(
                f"Polyline braucht mindestens {self.MIN_VERTICES} Punkte, nicht {len(self._vertices)}")
        self._closed = bool(closed)

    @property
    def vertices(self) -> List[Vector2]:
        """Kopie der Punktliste."""
        return list(self._vertices)

    @vertices.setter
    def vertices(self, value: Iterable[Vector2]):
        new_vertices = list(value)
        if len(new_vertices) < self.MIN_VERTICES:
            raise InvalidGeometryError(
                f"Polyline braucht mindestens {self.MIN_VERTICES} Punkte, nicht {len(new_vertices)}")
        self._vertices = new_vertices
        self._invalidate()

    @property
    def closed(self) -> bool:
        return self._closed

    @closed.setter
    def closed(self, value: bool):
        self._closed = bool(value)
        self._invalidate()

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def segment_count(self) -> int:
        count = len(self._vertices)
        return count if self._closed else count - 1

    def segment(self, index: int) -> Tuple[Vector2, Vector2]:
        count = len(self._vertices)
        return self._vertices[index], self._vertices[(index + 1) % count]

    def segments(self) -> List[Line]:
        return [Line(*self.segment(i), layer=self.layer) for i in range(self.segment_count)]

    @property
    def total_length(self) -> float:
        return sum(a.distance_to(b) for a, b in (self.segment(i) for i in range(self.segment_count)))

    def add_vertex(self, vertex: Vector2) -> None:
        self._vertices.append(vertex)
        self._invalidate()

    def insert_vertex(self, index: int, vertex: Vector2) -> None:
        self._vertices.insert(index, vertex)
        self._invalidate()

    def set_vertex(self, index: int, vertex: Vector2) -> None:
        self._vertices[index] = vertex
        self._invalidate()

    def remove_vertex(self, index: int) -> None:
        if len(self._vertices) <= self.MIN_VERTICES:
            raise InvalidGeometryError("Polyline kann nicht unter 2 Punkte schrumpfen")
        del self._vertices[index]
        self._invalidate()

    def contains_point_inside(self, point: Vector2) -> bool:
        """Punkt im Inneren (nur geschlossene Polylines)."""
        if not self._closed or len(self._vertices) < 3:
            return False
        return _point_in_ring(point, self._vertices)

    def _compute_bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self._vertices)

    def nearest_point(self, point: Vector2) -> Vector2:
        best = self._vertices[0]
        best_dist = math.inf
        for i in range(self.segment_count):
            candidate = _closest_on_segment(point, *self.segment(i))
            dist = point.distance_squared_to(candidate)
            if dist < best_dist:
                best, best_dist = candidate, dist
        return best

    def intersects_rect(self, rect_min: Vector2, rect_max: Vector2) -> bool:
        return _polyline_intersects_rect(self._vertices, self._closed, rect_min, rect_max)

    def snap_points(self, kinds: Iterable[SnapType] = ALL_SNAP_TYPES) -> List[SnapPoint]:
        kinds = set(kinds)
        points = []
        if SnapType.ENDPOINT in kinds:
            points.extend(SnapPoint(v, SnapType.ENDPOINT, self) for v in self._vertices)
        if SnapType.MIDPOINT in kinds:
            for i in range(self.segment_count):
                a, b = self.segment(i)
                points.append(SnapPoint(a.lerp(b, 0.5), SnapType.MIDPOINT, self))
        return points

    def transform(self, matrix: 'AffineTransform') -> None:
        self._vertices = [matrix.apply(v) for v in self._vertices]
        self._invalidate()

    def clone(self) -> 'Polyline':
        return Polyline(self._vertices, self._closed, self.layer)

    def __repr__(self):
        return f"Polyline({len(self._vertices)} Punkte, {'closed' if self._closed else 'open'})"


# =============================================================================
# Rectangle
# =============================================================================

class Rectangle(Entity):
    """Achsparalleles Rechteck aus zwei gegenüberliegenden Ecken"""

    entity_type = EntityType.RECTANGLE

    def __init__(self, corner1: Vector2, corner2: Vector2, layer: str = "0"):
        super().__init__(layer)
        self._corner1 = corner1
        self._corner2 = corner2

    @property
    def corner1(self) -> Vector2:
        return self._corner1

    @corner1.setter
    def corner1(self, value: Vector2):
        self._corner1 = value
        self._invalidate()

    @property
    def corner2(self) -> Vector2:
        return self._corner2

    @corner2.setter
    def corner2(self, value: Vector2):
        self._corner2 = value
        self._invalidate()

    @property
    def min_corner(self) -> Vector2:
        return Vector2(min(self._corner1.x, self._corner2.x), min(self._corner1.y, self._corner2.y))

    @property
    def max_corner(self) -> Vector2:
        return Vector2(max(self._corner1.x, self._corner2.x), max(self._corner1.y, self._corner2.y))

    def corners(self) -> List[Vector2]:
        """Vier Ecken gegen den Uhrzeigersinn, beginnend bei min."""
        lo, hi = self.min_corner, self.max_corner
        return [lo, Vector2(hi.x, lo.y), hi, Vector2(lo.x, hi.y)]

    def edges(self) -> List[Line]:
        c = self.corners()
        return [Line(c[i], c[(i + 1) % 4], layer=self.layer) for i in range(4)]

    @property
    def center(self) -> Vector2:
        return self._corner1.lerp(self._corner2, 0.5)

    @property
    def width(self) -> float:
        return abs(self._corner2.x - self._corner1.x)

    @property
    def height(self) -> float:
        return abs(self._corner2.y - self._corner1.y)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def perimeter(self) -> float:
        return 2.0 * (self.width + self.height)

    def contains_point_inside(self, point: Vector2) -> bool:
        lo, hi = self.min_corner, self.max_corner
        return lo.x <= point.x <= hi.x and lo.y <= point.y <= hi.y

    def to_polyline(self) -> Polyline:
        return Polyline(self.corners(), closed=True, layer=self.layer)

    def _compute_bounding_box(self) -> BoundingBox:
        return BoundingBox(self.min_corner, self.max_corner)

    def nearest_point(self, point: Vector2) -> Vector2:
        c = self.corners()
        candidates = [_closest_on_segment(point, c[i], c[(i + 1) % 4]) for i in range(4)]
        return min(candidates, key=point.distance_squared_to)

    def intersects_rect(self, rect_min: Vector2, rect_max: Vector2) -> bool:
        return _polyline_intersects_rect(self.corners(), True, rect_min, rect_max)

    def snap_points(self, kinds: Iterable[SnapType] = ALL_SNAP_TYPES) -> List[SnapPoint]:
        kinds = set(kinds)
        corners = self.corners()
        points = []
        if SnapType.ENDPOINT in kinds:
            points.extend(SnapPoint(c, SnapType.ENDPOINT, self) for c in corners)
        if SnapType.MIDPOINT in kinds:
            for i in range(4):
                points.append(SnapPoint(corners[i].lerp(corners[(i + 1) % 4], 0.5), SnapType.MIDPOINT, self))
        if SnapType.CENTER in kinds:
            points.append(SnapPoint(self.center, SnapType.CENTER, self))
        return points

    def transform(self, matrix: 'AffineTransform') -> None:
        self._corner1 = matrix.apply(self._corner1)
        self._corner2 = matrix.apply(self._corner2)
        self._invalidate()

    def clone(self) -> 'Rectangle':
        return Rectangle(self._corner1, self._corner2, self.layer)

    def __repr__(self):
        return f"Rectangle({self.min_corner!r} .. {self.max_corner!r})"


def explode(entity: Entity) -> List[Entity]:
    """Zerlegt Polyline/Rectangle in Lines; andere Varianten bleiben ganz."""
    if isinstance(entity, Polyline):
        return entity.segments()
    if isinstance(entity, Rectangle):
        return entity.edges()
    return [entity]
