"""
PlanCad Drafting - Schnittpunkt-Berechnung
==========================================

Paarweise Schnittpunkte (Line-Line, Line-Circle, Circle-Circle),
Strahl-Verlängerung und Hilfsfunktionen für Trim/Extend.

Polyline und Rectangle werden vom Aufrufer (bzw. find_all_intersections)
in Lines zerlegt. Bögen werden nicht automatisch auf Vollkreise
zurückgeführt: intersect() lehnt Paare mit Arc ab.

Verwendung:
    from drafting.intersection import IntersectionCalculator

    calc = IntersectionCalculator()
    hits = calc.intersect(line, circle)
    cuts = calc.find_all_intersections(line, cutters)
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from config.feature_flags import is_enabled
from config.tolerances import TolerancePolicy, resolve_policy
from .geometry import (
    Arc, BoundingBox, Circle, Entity, EntityType, Line,
    TWO_PI, UnsupportedOperationError, explode,
)
from .vector import Vector2


@dataclass(frozen=True)
class IntersectionPoint:
    """
    Schnittpunkt mit Parametern auf beiden Entities.

    t1/t2 sind normierte Positionen in [0, 1]: bei Lines entlang der
    Strecke, bei Kreisen der Winkel / 2pi.
    """
    point: Vector2
    t1: float
    t2: Optional[float] = None


@dataclass(frozen=True)
class CutPoint:
    """Schnittpunkt auf einer Ziel-Entity mit der schneidenden Entity."""
    point: Vector2
    t: float
    cutter: Entity


def _angle_parameter(center: Vector2, point: Vector2) -> float:
    angle = (point - center).angle()
    if angle < 0.0:
        angle += TWO_PI
    return angle / TWO_PI


# =============================================================================
# Paarweise Routinen
# =============================================================================

def line_line_infinite(p1: Vector2, p2: Vector2, p3: Vector2, p4: Vector2,
                       tolerances: Optional[TolerancePolicy] = None
                       ) -> Optional[Tuple[Vector2, float, float]]:
    """
    Schnitt zweier unendlicher Geraden durch (p1, p2) und (p3, p4).

    Returns:
        (Punkt, t auf p1->p2, u auf p3->p4) oder None wenn parallel
    """
    tol = resolve_policy(tolerances)
    r = p2 - p1
    s = p4 - p3
    rxs = r.cross(s)
    if abs(rxs) < tol.cross:
        return None
    qp = p3 - p1
    t = qp.cross(s) / rxs
    u = qp.cross(r) / rxs
    return p1 + r * t, t, u


def _collinear_overlap(a: Line, b: Line, tol: TolerancePolicy) -> List[IntersectionPoint]:
    """Endpunkte des überlappenden Bereichs zweier kollinearer Strecken."""
    r = a.end - a.start
    if r.length_squared == 0.0 or abs((b.start - a.start).cross(r)) >= tol.cross * max(1.0, r.length):
        return []
    t_b0 = a.parameter_of(b.start)
    t_b1 = a.parameter_of(b.end)
    lo = max(0.0, min(t_b0, t_b1))
    hi = min(1.0, max(t_b0, t_b1))
    if lo > hi:
        return []
    results = []
    for t in ((lo,) if math.isclose(lo, hi, abs_tol=tol.trim_gap) else (lo, hi)):
        point = a.point_at(t)
        results.append(IntersectionPoint(point, t, b.parameter_of(point)))
    return results


def line_line(a: Line, b: Line, tolerances: Optional[TolerancePolicy] = None) -> List[IntersectionPoint]:
    """Schnitt zweier Strecken; parallele/kollineare Strecken liefern []."""
    tol = resolve_policy(tolerances)
    p1, p2, p3, p4 = a.start, a.end, b.start, b.end
    r = p2 - p1
    s = p4 - p3
    rxs = r.cross(s)

    if abs(rxs) < tol.cross:
        if is_enabled("line_overlap_detection"):
            return _collinear_overlap(a, b, tol)
        return []

    qp = p3 - p1
    t = qp.cross(s) / rxs
    u = qp.cross(r) / rxs

    if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
        return [IntersectionPoint(p1 + r * t, t, u)]
    return []


def line_circle(line: Line, circle: Circle,
                tolerances: Optional[TolerancePolicy] = None) -> List[IntersectionPoint]:
    """
    Schnitt Strecke/Kreis über die Quadratische |f + t*d|^2 = r^2.

    d ist der Einheits-Richtungsvektor, t läuft in [0, Länge] und wird
    für t1 auf [0, 1] normiert.
    """
    tol = resolve_policy(tolerances)
    length = line.length
    if length < tol.point:
        return []

    d = (line.end - line.start) / length
    f = line.start - circle.center
    b = 2.0 * f.dot(d)
    c = f.length_squared - circle.radius * circle.radius
    disc = b * b - 4.0 * c

    # Relative Toleranz für die Diskriminante (Tangenten-Fall)
    disc_tol = tol.discriminant * max(1.0, b * b + abs(4.0 * c))
    if disc < -disc_tol:
        return []

    if abs(disc) <= disc_tol:
        roots = [-b / 2.0]
    else:
        root = math.sqrt(disc)
        roots = [(-b - root) / 2.0, (-b + root) / 2.0]

    results = []
    for t in roots:
        if 0.0 <= t <= length:
            point = line.start + d * t
            results.append(IntersectionPoint(point, t / length, _angle_parameter(circle.center, point)))
    return results


def circle_circle(c1: Circle, c2: Circle,
                  tolerances: Optional[TolerancePolicy] = None) -> List[IntersectionPoint]:
    """Radikal-Linien-Konstruktion; bis zu zwei Punkte, einer bei Tangente."""
    tol = resolve_policy(tolerances)
    eps = tol.point
    r1, r2 = c1.radius, c2.radius
    delta = c2.center - c1.center
    d = delta.length

    if d > r1 + r2 + eps:
        return []  # zu weit entfernt
    if d < abs(r1 - r2) - eps:
        return []  # ineinander
    if d < eps:
        return []  # konzentrisch oder deckungsgleich

    a = (r1 * r1 - r2 * r2 + d * d) / (2.0 * d)
    h = math.sqrt(max(0.0, r1 * r1 - a * a))
    direction = delta / d
    base = c1.center + direction * a
    perp = direction.perpendicular()

    points = [base + perp * h]
    if h > eps:
        points.append(base - perp * h)

    return [
        IntersectionPoint(p, _angle_parameter(c1.center, p), _angle_parameter(c2.center, p))
        for p in points
    ]


def _circle_line(circle: Circle, line: Line,
                 tolerances: Optional[TolerancePolicy] = None) -> List[IntersectionPoint]:
    return [IntersectionPoint(hit.point, hit.t2, hit.t1) for hit in line_circle(line, circle, tolerances)]


PairRoutine = Callable[..., List[IntersectionPoint]]

_DISPATCH: Dict[Tuple[EntityType, EntityType], PairRoutine] = {
    (EntityType.LINE, EntityType.LINE): line_line,
    (EntityType.LINE, EntityType.CIRCLE): line_circle,
    (EntityType.CIRCLE, EntityType.LINE): _circle_line,
    (EntityType.CIRCLE, EntityType.CIRCLE): circle_circle,
}


# =============================================================================
# Calculator
# =============================================================================

class IntersectionCalculator:
    """
    Schnittpunkt-Engine mit injizierter Toleranz-Policy.

    Im skalierungs-relativen Modus wird die Policy pro Paar an die
    gemeinsame Ausdehnung der beiden Entities angepasst.
    """

    def __init__(self, tolerances: Optional[TolerancePolicy] = None):
        self._tolerances = tolerances

    @property
    def tolerances(self) -> TolerancePolicy:
        return resolve_policy(self._tolerances)

    def _policy_for(self, *entities: Entity) -> TolerancePolicy:
        policy = self.tolerances
        if not policy.relative:
            return policy
        box = BoundingBox.union_all(e.bounding_box() for e in entities)
        return policy.for_extent(math.hypot(box.width, box.height))

    @staticmethod
    def supports(a: Entity, b: Entity) -> bool:
        return (a.entity_type, b.entity_type) in _DISPATCH

    def intersect(self, a: Entity, b: Entity) -> List[IntersectionPoint]:
        """
        Schnittpunkte zweier Entities.

        Raises:
            UnsupportedOperationError: für Paare außerhalb Line/Circle
                (Polyline/Rectangle vorher mit explode() zerlegen)
        """
        routine = _DISPATCH.get((a.entity_type, b.entity_type))
        if routine is None:
            logger.warning(f"[INTERSECT] Nicht unterstütztes Paar: {a.entity_type.name}/{b.entity_type.name}")
            raise UnsupportedOperationError(
                f"Schnitt {a.entity_type.name}/{b.entity_type.name} nicht unterstützt")
        return routine(a, b, self._policy_for(a, b))

    def find_all_intersections(self, entity: Entity, cutters: Sequence[Entity]) -> List[CutPoint]:
        """
        Alle Schnittpunkte von entity mit den Cuttern, aufsteigend nach t.

        Polyline/Rectangle-Cutter werden in Lines zerlegt; der Cutter im
        Ergebnis ist die ursprüngliche Entity. Bögen und entity selbst
        werden übersprungen.
        """
        results: List[CutPoint] = []
        for cutter in cutters:
            if cutter is entity:
                continue
            for part in explode(cutter):
                if not self.supports(entity, part):
                    logger.debug(f"[INTERSECT] Überspringe Cutter {part.entity_type.name}")
                    continue
                for hit in self.intersect(entity, part):
                    results.append(CutPoint(hit.point, hit.t1, cutter))
        results.sort(key=lambda cut: cut.t)
        return results

    def extend_line_to_entity(self, line: Line, boundary: Entity) -> Optional[Vector2]:
        """
        Verlängert line über ihr Ende hinaus bis zur Grenz-Entity.

        Der Strahl läuft von end in Richtung start->end über
        ``extend_ray`` Einheiten. Nur Treffer strikt hinter end zählen.

        Returns:
            Nächster Treffer oder None
        """
        tol = self._policy_for(line, boundary)
        length = line.length
        if length < tol.point:
            return None
        direction = line.direction
        far_end = line.end + direction * tol.extend_ray

        best: Optional[Vector2] = None
        best_dist = math.inf

        def _consider(point: Vector2):
            nonlocal best, best_dist
            along = (point - line.start).dot(direction)
            if along <= length + tol.point:
                return
            dist = along - length
            if dist <= tol.extend_ray and dist < best_dist:
                best, best_dist = point, dist

        for part in explode(boundary):
            if isinstance(part, Line):
                hit = line_line_infinite(line.start, far_end, part.start, part.end, tol)
                if hit is None:
                    continue
                point, _, u = hit
                if -tol.point <= u * part.length <= part.length + tol.point:
                    _consider(point)
            elif isinstance(part, (Circle, Arc)):
                for point in self._ray_circle_points(line.start, direction, part.center, part.radius):
                    if isinstance(part, Arc) and not part.contains_angle((point - part.center).angle(), 1e-9):
                        continue
                    _consider(point)

        if best is None:
            logger.debug(f"[EXTEND] Kein Treffer auf {boundary.entity_type.name}")
        return best

    @staticmethod
    def _ray_circle_points(origin: Vector2, direction: Vector2, center: Vector2,
                           radius: float) -> List[Vector2]:
        f = origin - center
        b = 2.0 * f.dot(direction)
        c = f.length_squared - radius * radius
        disc = b * b - 4.0 * c
        if disc < 0.0:
            return []
        root = math.sqrt(disc)
        return [origin + direction * t for t in ((-b - root) / 2.0, (-b + root) / 2.0) if t >= 0.0]

    @staticmethod
    def closest_intersection(points: Sequence[Vector2], reference: Vector2) -> Optional[Vector2]:
        """Schnittpunkt mit dem kleinsten Abstand zum Referenzpunkt."""
        if not points:
            return None
        return min(points, key=reference.distance_squared_to)
