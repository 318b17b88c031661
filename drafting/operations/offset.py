"""
PlanCad Drafting - Offset Operation
===================================

Parallele Kopie von Line, Circle, Polyline und Rectangle.

Seiten-Konvention:
- Line/Polyline: LEFT = links in Laufrichtung (+Normale), RIGHT = rechts
- Circle: INNER = kleinerer Radius, OUTER = größerer Radius
- Rectangle/geschlossene Polyline: INNER/OUTER werden über den
  Umlaufsinn auf LEFT/RIGHT abgebildet
- Referenzpunkt: die Seite, auf der der Punkt liegt

Verwendung:
    from drafting.operations import OffsetOperation, OffsetSide

    op = OffsetOperation()
    parallel = op.execute(line, 2.0, OffsetSide.LEFT)
    ring = op.execute(circle, 1.0, Vector2(0, 0))   # Seite aus Referenzpunkt
"""

from enum import Enum
from typing import List, Optional, Union

from loguru import logger

from ..geometry import Circle, Entity, Line, Polyline, Rectangle
from ..intersection import line_line_infinite
from ..vector import Vector2
from .base import EditOperation, OperationResult


class OffsetSide(Enum):
    LEFT = "left"
    RIGHT = "right"
    INNER = "inner"
    OUTER = "outer"


SideSpec = Union[OffsetSide, str, Vector2]


def _signed_area(points: List[Vector2]) -> float:
    """Shoelace-Fläche (> 0 gegen den Uhrzeigersinn)."""
    area = 0.0
    count = len(points)
    for i in range(count):
        a, b = points[i], points[(i + 1) % count]
        area += a.x * b.y - b.x * a.y
    return area / 2.0


class OffsetOperation(EditOperation):
    """Offset für Line, Circle, Polyline und Rectangle."""

    name = "OFFSET"

    SUPPORTED = (Line, Circle, Polyline, Rectangle)

    def execute(self, entity: Entity, distance: float, side: SideSpec) -> Optional[Entity]:
        """
        Args:
            entity: Line, Circle, Polyline oder Rectangle
            distance: Offset-Abstand (> 0)
            side: OffsetSide, dessen Name als String, oder Referenzpunkt

        Returns:
            Neue Entity oder None (Abstand <= 0, Radius <= 0, degeneriert)

        Raises:
            UnsupportedOperationError: für Arc
        """
        self._require(entity, self.SUPPORTED)
        if distance <= 0.0:
            return self._decline(f"Offset-Abstand muss > 0 sein, nicht {distance}")

        resolved = self.resolve_side(entity, side)
        if isinstance(entity, Line):
            result = self.offset_line(entity, distance, resolved)
        elif isinstance(entity, Circle):
            result = self.offset_circle(entity, distance, resolved)
        elif isinstance(entity, Rectangle):
            result = self.offset_rectangle(entity, distance, resolved)
        else:
            result = self.offset_polyline(entity, distance, resolved)

        if result is not None:
            logger.debug(f"[OFFSET] {type(entity).__name__} um {distance} nach {resolved.value}")
            self._record(OperationResult.ok("Offset erstellt", result))
        return result

    # --- Seiten ---

    def resolve_side(self, entity: Entity, side: SideSpec) -> OffsetSide:
        if isinstance(side, Vector2):
            return self.side_from_point(entity, side)
        if isinstance(side, str):
            side = OffsetSide(side.lower())

        closed_ring = self._ring_of(entity)
        if side in (OffsetSide.INNER, OffsetSide.OUTER) and closed_ring is not None:
            # Innen liegt links, wenn der Ring gegen den Uhrzeigersinn läuft
            ccw = _signed_area(closed_ring) > 0.0
            inner_is_left = ccw
            if side == OffsetSide.INNER:
                return OffsetSide.LEFT if inner_is_left else OffsetSide.RIGHT
            return OffsetSide.RIGHT if inner_is_left else OffsetSide.LEFT

        if isinstance(entity, Circle):
            if side not in (OffsetSide.INNER, OffsetSide.OUTER):
                raise ValueError(f"Kreis-Offset braucht INNER/OUTER, nicht {side.value}")
        elif side not in (OffsetSide.LEFT, OffsetSide.RIGHT):
            raise ValueError(f"{type(entity).__name__}-Offset braucht LEFT/RIGHT, nicht {side.value}")
        return side

    @staticmethod
    def _ring_of(entity: Entity) -> Optional[List[Vector2]]:
        if isinstance(entity, Rectangle):
            return entity.corners()
        if isinstance(entity, Polyline) and entity.closed:
            return entity.vertices
        return None

    def side_from_point(self, entity: Entity, point: Vector2) -> OffsetSide:
        """Seite, auf der der Referenzpunkt liegt."""
        self._require(entity, self.SUPPORTED)
        if isinstance(entity, Circle):
            inside = point.distance_to(entity.center) < entity.radius
            return OffsetSide.INNER if inside else OffsetSide.OUTER
        if isinstance(entity, Line):
            return self._side_of_segment(entity.start, entity.end, point)
        if isinstance(entity, Rectangle):
            # Ecken laufen gegen den Uhrzeigersinn: innen = links
            return OffsetSide.LEFT if entity.contains_point_inside(point) else OffsetSide.RIGHT

        nearest = min(entity.segments(), key=lambda seg: seg.distance_to(point))
        return self._side_of_segment(nearest.start, nearest.end, point)

    @staticmethod
    def _side_of_segment(start: Vector2, end: Vector2, point: Vector2) -> OffsetSide:
        cross = (end - start).cross(point - start)
        return OffsetSide.LEFT if cross > 0.0 else OffsetSide.RIGHT

    # --- Varianten ---

    def offset_line(self, line: Line, distance: float, side: OffsetSide) -> Optional[Line]:
        if line.length < self.tolerances.point:
            return self._decline("Linie hat Länge 0")
        signed = distance if side == OffsetSide.LEFT else -distance
        shift = line.direction.perpendicular() * signed
        return Line(line.start + shift, line.end + shift, layer=line.layer)

    def offset_circle(self, circle: Circle, distance: float, side: OffsetSide) -> Optional[Circle]:
        radius = circle.radius + distance if side == OffsetSide.OUTER else circle.radius - distance
        if radius <= 0.0:
            return self._decline(f"Offset-Radius {radius:.4f} <= 0")
        return Circle(circle.center, radius, layer=circle.layer)

    def offset_rectangle(self, rect: Rectangle, distance: float, side: OffsetSide) -> Optional[Rectangle]:
        grow = -distance if side == OffsetSide.LEFT else distance
        lo, hi = rect.min_corner, rect.max_corner
        new_lo = Vector2(lo.x - grow, lo.y - grow)
        new_hi = Vector2(hi.x + grow, hi.y + grow)
        if new_hi.x - new_lo.x <= self.tolerances.point or new_hi.y - new_lo.y <= self.tolerances.point:
            return self._decline("Rechteck kollabiert beim Offset")
        return Rectangle(new_lo, new_hi, layer=rect.layer)

    def offset_polyline(self, polyline: Polyline, distance: float, side: OffsetSide) -> Optional[Polyline]:
        vertices = self._dedupe(polyline.vertices, polyline.closed)
        min_vertices = 3 if polyline.closed else 2
        if len(vertices) < min_vertices:
            return self._decline("Polyline degeneriert (zu wenige verschiedene Punkte)")

        signed = distance if side == OffsetSide.LEFT else -distance
        count = len(vertices)
        seg_count = count if polyline.closed else count - 1
        segments = []
        for i in range(seg_count):
            a, b = vertices[i], vertices[(i + 1) % count]
            shift = (b - a).normalized().perpendicular() * signed
            segments.append((a + shift, b + shift))

        if polyline.closed:
            new_vertices = [
                self._miter(segments[i - 1], segments[i], fallback=segments[i][0])
                for i in range(seg_count)
            ]
        else:
            new_vertices = [segments[0][0]]
            for i in range(1, seg_count):
                new_vertices.append(self._miter(segments[i - 1], segments[i], fallback=segments[i - 1][1]))
            new_vertices.append(segments[-1][1])

        return Polyline(new_vertices, closed=polyline.closed, layer=polyline.layer)

    def _miter(self, prev_seg, next_seg, fallback: Vector2) -> Vector2:
        """Schnitt zweier aufeinanderfolgender Offset-Segmente (unendlich verlängert)."""
        d1 = (prev_seg[1] - prev_seg[0]).normalized()
        d2 = (next_seg[1] - next_seg[0]).normalized()
        if abs(d1.cross(d2)) < self.tolerances.miter_parallel:
            return fallback
        hit = line_line_infinite(prev_seg[0], prev_seg[1], next_seg[0], next_seg[1], self.tolerances)
        return hit[0] if hit is not None else fallback

    def _dedupe(self, vertices: List[Vector2], closed: bool) -> List[Vector2]:
        eps = self.tolerances.point
        result: List[Vector2] = []
        for v in vertices:
            if not result or result[-1].distance_to(v) > eps:
                result.append(v)
        if closed and len(result) > 1 and result[0].distance_to(result[-1]) <= eps:
            result.pop()
        return result
