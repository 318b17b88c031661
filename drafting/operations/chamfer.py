"""
PlanCad Drafting - Chamfer Operation
====================================

Fast die Ecke zwischen zwei Linien mit einer geraden Verbindungslinie.

Varianten:
- symmetrisch: gleicher Abstand auf beiden Linien
- asymmetrisch: distance1 auf line1, distance2 auf line2
- Winkel: distance2 = distance1 * tan(angle)

Verwendung:
    from drafting.operations import ChamferOperation

    op = ChamferOperation()
    result = op.execute(line1, line2, 1.0)            # symmetrisch
    result = op.with_angle(line1, line2, 1.0, 30.0)   # Abstand + Winkel in Grad
"""

import math
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from ..geometry import Entity, Line, Polyline
from ..vector import Vector2
from .base import EditOperation, OperationResult
from .fillet import find_corner


@dataclass
class ChamferResult:
    """Ergebnis einer Fase: Verbindungslinie und die beiden gekürzten Linien."""
    chamfer_line: Line
    line1: Line
    line2: Line

    @property
    def length(self) -> float:
        return self.chamfer_line.length


class ChamferOperation(EditOperation):
    """Chamfer zwischen zwei Lines und an Polyline-Ecken."""

    name = "CHAMFER"

    def execute(self, line1: Entity, line2: Entity, distance1: float,
                distance2: Optional[float] = None) -> Optional[ChamferResult]:
        """
        Args:
            distance1: Abstand von der Ecke auf line1
            distance2: Abstand auf line2 (None = symmetrisch)

        Returns:
            ChamferResult oder None (Abstand <= 0, parallel, Abstand zu groß)

        Raises:
            UnsupportedOperationError: wenn eine Entity keine Line ist
        """
        self._require(line1, (Line,))
        self._require(line2, (Line,))
        if distance2 is None:
            distance2 = distance1
        if distance1 <= 0.0 or distance2 <= 0.0:
            return self._decline(f"Abstände müssen > 0 sein ({distance1}, {distance2})")

        corner = find_corner(line1, line2, self.tolerances)
        if corner is None:
            return self._decline("Linien parallel, kollinear oder degeneriert")
        if distance1 > corner.reach1 or distance2 > corner.reach2:
            return self._decline("Fasen-Abstand länger als die Linie")

        point1 = corner.point_back(1, distance1)
        point2 = corner.point_back(2, distance2)
        result = ChamferResult(
            chamfer_line=Line(point1, point2, layer=line1.layer),
            line1=corner.moved(1, point1),
            line2=corner.moved(2, point2),
        )
        logger.debug(f"[CHAMFER] d1={distance1:.4g}, d2={distance2:.4g}, Fase {result.length:.4f}")
        self._record(OperationResult.ok("Fase erstellt", result))
        return result

    def with_angle(self, line1: Entity, line2: Entity, distance: float,
                   angle_deg: float) -> Optional[ChamferResult]:
        """Fase aus Abstand auf line1 und Winkel (Grad): distance2 = distance * tan(angle)."""
        if not 0.0 < angle_deg < 90.0:
            self._require(line1, (Line,))
            self._require(line2, (Line,))
            return self._decline(f"Fasen-Winkel muss in (0, 90) liegen, nicht {angle_deg}")
        distance2 = distance * math.tan(math.radians(angle_deg))
        return self.execute(line1, line2, distance, distance2)

    def chamfer_polyline(self, polyline: Entity, distance: float) -> Optional[Polyline]:
        """
        Fast alle geeigneten Ecken einer Polyline.

        Geschlossene Polylines: alle Ecken; offene: nur innere Ecken.
        Ecken mit kollinearen Nachbarn oder zu kurzen Segmenten bleiben.
        """
        self._require(polyline, (Polyline,))
        if distance <= 0.0:
            return self._decline(f"Abstand muss > 0 sein, nicht {distance}")

        vertices = polyline.vertices
        count = len(vertices)
        closed = polyline.closed
        result: List[Vector2] = []
        cut = 0

        for i, vertex in enumerate(vertices):
            interior = closed or 0 < i < count - 1
            if not interior:
                result.append(vertex)
                continue
            prev_pt = vertices[(i - 1) % count]
            next_pt = vertices[(i + 1) % count]
            into = vertex - prev_pt
            back = vertex - next_pt
            if into.length < distance or back.length < distance:
                result.append(vertex)
                continue
            angle = into.angle_to(back)
            if angle < self.tolerances.angle or angle > math.pi - self.tolerances.angle:
                result.append(vertex)
                continue
            result.append(vertex - into.normalized() * distance)
            result.append(vertex - back.normalized() * distance)
            cut += 1

        if cut == 0:
            return self._decline("Keine Ecke fasbar")
        self._record(OperationResult.ok(f"{cut} Ecken gefast"))
        return Polyline(result, closed=closed, layer=polyline.layer)

    def can_chamfer(self, line1: Entity, line2: Entity, distance1: float,
                    distance2: Optional[float] = None) -> bool:
        if not isinstance(line1, Line) or not isinstance(line2, Line):
            return False
        distance2 = distance1 if distance2 is None else distance2
        if distance1 <= 0.0 or distance2 <= 0.0:
            return False
        corner = find_corner(line1, line2, self.tolerances)
        return corner is not None and distance1 <= corner.reach1 and distance2 <= corner.reach2

    can_execute = can_chamfer
