"""
PlanCad Drafting - Fillet Operation
===================================

Rundet die Ecke zwischen zwei Linien mit einem tangentialen Bogen ab.

Die Ecke ist der Schnittpunkt der unendlich verlängerten Linien. Von
jeder Linie bleibt das Stück zwischen ihrem fernen Endpunkt und dem
Tangentenpunkt erhalten; der ecken-nahe Endpunkt wird ersetzt.

Verwendung:
    from drafting.operations import FilletOperation

    op = FilletOperation()
    result = op.execute(line1, line2, radius=2.0)
    if result is not None:
        arc, new_line1, new_line2 = result.arc, result.line1, result.line2
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from loguru import logger

from config.tolerances import TolerancePolicy
from ..geometry import Arc, Entity, Line
from ..intersection import line_line_infinite
from ..vector import Vector2
from .base import EditOperation, OperationResult


@dataclass
class CornerData:
    """Ecke zwischen zwei Linien (Schnitt der unendlichen Verlängerungen)."""
    line1: Line
    line2: Line
    corner: Vector2
    near1_is_start: bool  # welcher Endpunkt von line1 an der Ecke liegt
    near2_is_start: bool
    dir1: Vector2  # Einheitsvektor vom fernen Endpunkt von line1 zur Ecke
    dir2: Vector2  # Einheitsvektor vom fernen Endpunkt von line2 zur Ecke
    reach1: float  # Abstand Ecke -> ferner Endpunkt
    reach2: float
    angle: float  # Innenwinkel der Ecke (Radians)

    def point_back(self, index: int, distance: float) -> Vector2:
        """Punkt im Abstand distance von der Ecke zurück entlang line1/line2."""
        direction = self.dir1 if index == 1 else self.dir2
        return self.corner - direction * distance

    def moved(self, index: int, new_point: Vector2) -> Line:
        """Kopie von line1/line2 mit ersetztem ecken-nahem Endpunkt."""
        line = self.line1 if index == 1 else self.line2
        near_is_start = self.near1_is_start if index == 1 else self.near2_is_start
        if near_is_start:
            return Line(new_point, line.end, layer=line.layer)
        return Line(line.start, new_point, layer=line.layer)


def find_corner(line1: Line, line2: Line, tolerances: TolerancePolicy) -> Optional[CornerData]:
    """
    Analysiert die Ecke zweier Linien.

    Returns:
        None bei Linien der Länge 0, parallelen oder kollinearen Linien
    """
    if line1.length < tolerances.point or line2.length < tolerances.point:
        return None

    hit = line_line_infinite(line1.start, line1.end, line2.start, line2.end, tolerances)
    if hit is None:
        return None
    corner = hit[0]

    near1_is_start = corner.distance_to(line1.start) <= corner.distance_to(line1.end)
    near2_is_start = corner.distance_to(line2.start) <= corner.distance_to(line2.end)
    far1 = line1.end if near1_is_start else line1.start
    far2 = line2.end if near2_is_start else line2.start

    reach1 = corner.distance_to(far1)
    reach2 = corner.distance_to(far2)
    if reach1 < tolerances.point or reach2 < tolerances.point:
        return None

    dir1 = (corner - far1) / reach1
    dir2 = (corner - far2) / reach2
    angle = dir1.angle_to(dir2)
    if angle < tolerances.angle or angle > math.pi - tolerances.angle:
        return None

    return CornerData(line1, line2, corner, near1_is_start, near2_is_start,
                      dir1, dir2, reach1, reach2, angle)


@dataclass
class FilletResult:
    """Ergebnis eines Fillets: Bogen und die beiden gekürzten Linien."""
    arc: Arc
    line1: Line
    line2: Line
    tangent1: Vector2
    tangent2: Vector2
    corner: Vector2


class FilletOperation(EditOperation):
    """
    Fillet zwischen zwei Lines.

    Tangentenabstand d = r / tan(θ/2), θ = Innenwinkel der Ecke.
    Der Mittelpunkt liegt auf der Seite von line1, auf der line2 liegt;
    der Bogen läuft von Tangentenpunkt 1 nach Tangentenpunkt 2.
    """

    name = "FILLET"

    def execute(self, line1: Entity, line2: Entity, radius: float) -> Optional[FilletResult]:
        """
        Returns:
            FilletResult oder None (Radius <= 0, parallel, Radius zu groß)

        Raises:
            UnsupportedOperationError: wenn eine Entity keine Line ist
        """
        self._require(line1, (Line,))
        self._require(line2, (Line,))
        if radius <= 0.0:
            return self._decline(f"Radius muss > 0 sein, nicht {radius}")

        corner = find_corner(line1, line2, self.tolerances)
        if corner is None:
            return self._decline("Linien parallel, kollinear oder degeneriert")

        tan_dist = radius / math.tan(corner.angle / 2.0)
        if tan_dist > corner.reach1 or tan_dist > corner.reach2:
            return self._decline(f"Radius zu groß (Tangentenabstand {tan_dist:.4f})")

        tangent1 = corner.point_back(1, tan_dist)
        tangent2 = corner.point_back(2, tan_dist)

        # Laufrichtung: line1 in die Ecke hinein, line2 aus ihr heraus
        side = 1.0 if corner.dir1.cross(-corner.dir2) > 0.0 else -1.0
        center = tangent1 + corner.dir1.perpendicular() * (radius * side)

        arc = Arc(
            center,
            radius,
            (tangent1 - center).angle(),
            (tangent2 - center).angle(),
            ccw=side > 0.0,
            layer=line1.layer,
        )
        result = FilletResult(
            arc=arc,
            line1=corner.moved(1, tangent1),
            line2=corner.moved(2, tangent2),
            tangent1=tangent1,
            tangent2=tangent2,
            corner=corner.corner,
        )
        logger.debug(f"[FILLET] R={radius:.4g} an ({corner.corner.x:.3f}, {corner.corner.y:.3f}), "
                     f"Innenwinkel {math.degrees(corner.angle):.2f}°")
        self._record(OperationResult.ok(f"Fillet R={radius:.4g} erstellt", result))
        return result

    def corner(self, line1: Entity, line2: Entity) -> Optional[Tuple[Line, Line]]:
        """
        Fillet mit Radius 0: beide Linien enden exakt im Schnittpunkt.

        Returns:
            (line1, line2) verlängert/gekürzt oder None bei parallelen Linien
        """
        self._require(line1, (Line,))
        self._require(line2, (Line,))
        data = find_corner(line1, line2, self.tolerances)
        if data is None:
            return self._decline("Linien parallel, kollinear oder degeneriert")
        self._record(OperationResult.ok("Ecke geschlossen"))
        return data.moved(1, data.corner), data.moved(2, data.corner)

    def can_fillet(self, line1: Entity, line2: Entity, radius: float) -> bool:
        if not isinstance(line1, Line) or not isinstance(line2, Line) or radius <= 0.0:
            return False
        data = find_corner(line1, line2, self.tolerances)
        if data is None:
            return False
        tan_dist = radius / math.tan(data.angle / 2.0)
        return tan_dist <= data.reach1 and tan_dist <= data.reach2

    can_execute = can_fillet
