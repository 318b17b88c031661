"""
PlanCad Drafting - Extend Operation
===================================

Verlängert das dem Klick nähere Linien-Ende bis zur nächsten Grenz-Entity.

Verwendung:
    from drafting.operations import ExtendOperation

    op = ExtendOperation()
    extended = op.execute(line, click_point, boundaries)
    if extended is None:
        # keine Grenze in Verlängerungsrichtung
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from loguru import logger

from ..geometry import Entity, Line
from ..vector import Vector2
from .base import EditOperation, OperationResult


@dataclass
class ExtendData:
    """Beschreibt eine geplante Linien-Verlängerung."""
    line: Line
    extend_start: bool  # True = Start-Punkt verlängern, False = End-Punkt
    new_point: Vector2
    boundary: Entity

    @property
    def distance(self) -> float:
        old = self.line.start if self.extend_start else self.line.end
        return old.distance_to(self.new_point)


class ExtendOperation(EditOperation):
    """
    Extend für Lines.

    Trennt Analyse (find_extension) von Ausführung (execute).
    """

    name = "EXTEND"

    def find_extension(self, entity: Entity, click_point: Vector2,
                       boundaries: Sequence[Entity]) -> Optional[ExtendData]:
        """
        Sucht die nächste Grenze hinter dem klick-nahen Endpunkt.

        Raises:
            UnsupportedOperationError: wenn entity keine Line ist
        """
        self._require(entity, (Line,))
        line = entity

        extend_start = click_point.distance_to(line.start) < click_point.distance_to(line.end)
        # Strahl läuft immer über "end" hinaus: für den Start die umgedrehte Linie
        ray = line.reversed() if extend_start else line

        best: Optional[ExtendData] = None
        for boundary in boundaries:
            if boundary is entity:
                continue
            point = self.calculator.extend_line_to_entity(ray, boundary)
            if point is None:
                continue
            candidate = ExtendData(line, extend_start, point, boundary)
            if best is None or candidate.distance < best.distance:
                best = candidate

        if best is None:
            self._record(OperationResult.no_target("Keine Grenze in Verlängerungsrichtung"))
        return best

    def execute(self, entity: Entity, click_point: Vector2,
                boundaries: Sequence[Entity]) -> Optional[Line]:
        """
        Returns:
            Neue, verlängerte Line oder None
        """
        data = self.find_extension(entity, click_point, boundaries)
        if data is None:
            return None

        if data.extend_start:
            result = Line(data.new_point, entity.end, layer=entity.layer)
        else:
            result = Line(entity.start, data.new_point, layer=entity.layer)

        logger.debug(f"[EXTEND] {'Start' if data.extend_start else 'Ende'} um {data.distance:.4f} verlängert")
        self._record(OperationResult.ok("Verlängert", result))
        return result

    def extend_multiple(self, entities: Sequence[Entity], click_point: Vector2,
                        boundaries: Sequence[Entity]) -> List[Line]:
        """Verlängert alle Lines; nicht verlängerbare fallen weg."""
        results = []
        for entity in entities:
            extended = self.execute(entity, click_point, boundaries)
            if extended is not None:
                results.append(extended)
        return results

    def can_extend(self, entity: Entity, click_point: Vector2, boundaries: Sequence[Entity]) -> bool:
        if not isinstance(entity, Line):
            return False
        return self.find_extension(entity, click_point, boundaries) is not None

    can_execute = can_extend

    def extend_to_length(self, entity: Entity, new_length: float, from_start: bool = False) -> Optional[Line]:
        """
        Verlängert auf eine feste Länge entlang der eigenen Richtung.

        Returns:
            None wenn new_length nicht größer als die aktuelle Länge ist
        """
        self._require(entity, (Line,))
        length = entity.length
        if length < self.tolerances.point:
            return self._decline("Linie hat Länge 0")
        if new_length <= length:
            return self._decline(f"Neue Länge {new_length} nicht größer als {length:.4f}")

        direction = entity.direction
        if from_start:
            return Line(entity.end - direction * new_length, entity.end, layer=entity.layer)
        return Line(entity.start, entity.start + direction * new_length, layer=entity.layer)
