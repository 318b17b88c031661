"""
PlanCad Drafting - Transform Operations
=======================================

Spiegeln, Drehen, Skalieren, Verschieben, Kopieren, Ausrichten und
Verteilen. Jede Transformation baut eine AffineTransform und wendet sie
auf Klone an; die Eingaben bleiben unverändert.

Verwendung:
    from drafting.operations import TransformOperation, Alignment

    op = TransformOperation()
    mirrored = op.mirror(entities, Vector2(0, 0), Vector2(0, 1))
    aligned = op.align(entities, Alignment.LEFT)
"""

from enum import Enum
from typing import List, Optional, Sequence

from loguru import logger

from ..affine import AffineTransform
from ..geometry import BoundingBox, Entity, Polyline, Rectangle
from ..vector import Vector2
from .base import EditOperation, OperationResult


class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


class DistributeAxis(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


def transformed_clone(entity: Entity, matrix: AffineTransform) -> Entity:
    """
    Transformierte Kopie einer Entity.

    Ein Rectangle, das unter der Matrix nicht achsparallel bleibt, wird
    als geschlossene Polyline zurückgegeben.
    """
    if isinstance(entity, Rectangle) and not matrix.preserves_axes():
        return Polyline([matrix.apply(c) for c in entity.corners()], closed=True, layer=entity.layer)
    result = entity.clone()
    result.transform(matrix)
    return result


def selection_bounds(entities: Sequence[Entity]) -> Optional[BoundingBox]:
    return BoundingBox.union_all(e.bounding_box() for e in entities)


class TransformOperation(EditOperation):
    """Affine Transformationen und Ausrichtung für Auswahlmengen."""

    name = "TRANSFORM"

    def execute(self, entities: Sequence[Entity], matrix: AffineTransform) -> List[Entity]:
        return self.apply(entities, matrix)

    def apply(self, entities: Sequence[Entity], matrix: AffineTransform) -> List[Entity]:
        results = [transformed_clone(e, matrix) for e in entities]
        self._record(OperationResult.ok(f"{len(results)} Entities transformiert", results))
        return results

    def mirror(self, entities: Sequence[Entity], point: Vector2, direction: Vector2) -> List[Entity]:
        """Spiegelung an der Geraden durch point mit Richtung direction."""
        matrix = AffineTransform.mirror(point, direction)
        if matrix is None:
            self._decline("Spiegelachse ohne Richtung")
            return []
        logger.debug(f"[TRANSFORM] Spiegeln an {point!r} / {direction!r}")
        return self.apply(entities, matrix)

    def rotate(self, entities: Sequence[Entity], pivot: Vector2, angle: float) -> List[Entity]:
        """Rotation um pivot, angle in Radians (gegen den Uhrzeigersinn)."""
        return self.apply(entities, AffineTransform.rotation(angle, pivot))

    def scale(self, entities: Sequence[Entity], base: Vector2, sx: float,
              sy: Optional[float] = None) -> List[Entity]:
        sy = sx if sy is None else sy
        if sx == 0.0 or sy == 0.0:
            self._decline("Skalierungsfaktor 0")
            return []
        return self.apply(entities, AffineTransform.scaling(sx, sy, base))

    def move(self, entities: Sequence[Entity], offset: Vector2) -> List[Entity]:
        return self.apply(entities, AffineTransform.translation(offset))

    def copy(self, entities: Sequence[Entity], offset: Optional[Vector2] = None) -> List[Entity]:
        """Kopien, optional versetzt."""
        if offset is None:
            return [e.clone() for e in entities]
        return self.move(entities, offset)

    def align(self, entities: Sequence[Entity], alignment: Alignment,
              reference: Optional[Vector2] = None) -> List[Entity]:
        """
        Richtet die Auswahl als Ganzes an einer Referenz-Koordinate aus.

        Der Versatz kommt aus der gemeinsamen Bounding-Box; alle Entities
        werden um denselben Vektor verschoben, die Anordnung bleibt.
        LEFT/CENTER/RIGHT nutzen reference.x, TOP/MIDDLE/BOTTOM reference.y.
        """
        if isinstance(alignment, str):
            alignment = Alignment(alignment.lower())
        box = selection_bounds(entities)
        if box is None:
            return []
        ref = reference if reference is not None else Vector2(0.0, 0.0)

        if alignment == Alignment.LEFT:
            offset = Vector2(ref.x - box.min.x, 0.0)
        elif alignment == Alignment.CENTER:
            offset = Vector2(ref.x - box.center.x, 0.0)
        elif alignment == Alignment.RIGHT:
            offset = Vector2(ref.x - box.max.x, 0.0)
        elif alignment == Alignment.TOP:
            offset = Vector2(0.0, ref.y - box.max.y)
        elif alignment == Alignment.MIDDLE:
            offset = Vector2(0.0, ref.y - box.center.y)
        else:
            offset = Vector2(0.0, ref.y - box.min.y)

        logger.debug(f"[TRANSFORM] Ausrichten {alignment.value}: Versatz {offset!r}")
        return self.move(entities, offset)

    def distribute(self, entities: Sequence[Entity], axis: DistributeAxis,
                   spacing: Optional[float] = None) -> List[Entity]:
        """
        Verteilt Entities entlang einer Achse.

        Ohne spacing bleiben erste und letzte Entity (nach Box-Mitte sortiert)
        stehen; die Box-Mitten dazwischen liegen in gleichen Schritten.
        Mit spacing reihen sich die Entities ab der ersten mit festem
        Kanten-Abstand.

        Returns:
            Verschobene Klone in sortierter Reihenfolge
        """
        if isinstance(axis, str):
            axis = DistributeAxis(axis.lower())
        if len(entities) < 2 or (spacing is None and len(entities) < 3):
            return [e.clone() for e in entities]

        horizontal = axis == DistributeAxis.HORIZONTAL

        def lo(box: BoundingBox) -> float:
            return box.min.x if horizontal else box.min.y

        def mid(box: BoundingBox) -> float:
            return box.center.x if horizontal else box.center.y

        def extent(box: BoundingBox) -> float:
            return box.width if horizontal else box.height

        def shift(delta: float) -> Vector2:
            return Vector2(delta, 0.0) if horizontal else Vector2(0.0, delta)

        ordered = sorted(entities, key=lambda e: mid(e.bounding_box()))
        boxes = [e.bounding_box() for e in ordered]
        results = [ordered[0].clone()]

        if spacing is None:
            start = mid(boxes[0])
            step = (mid(boxes[-1]) - start) / (len(ordered) - 1)
            for i, (entity, box) in enumerate(zip(ordered[1:-1], boxes[1:-1]), start=1):
                results.extend(self.move([entity], shift(start + step * i - mid(box))))
            results.append(ordered[-1].clone())
        else:
            cursor = lo(boxes[0]) + extent(boxes[0]) + spacing
            for entity, box in zip(ordered[1:], boxes[1:]):
                results.extend(self.move([entity], shift(cursor - lo(box))))
                cursor += extent(box) + spacing

        self._record(OperationResult.ok(f"{len(results)} Entities verteilt ({axis.value})", results))
        return results
