"""
PlanCad Drafting - Trim Operation
=================================

Zerlegt eine Linie an allen Schnittpunkten mit den Cuttern und entfernt
das Teilstück unter dem Klickpunkt.

Verwendung:
    from drafting.operations import TrimOperation

    op = TrimOperation()
    analysis = op.analyze(line, click_point, cutters)   # Preview
    pieces = op.execute(line, click_point, cutters)     # neue Lines
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from ..geometry import Circle, Entity, Line, Polyline, Rectangle
from ..intersection import CutPoint
from ..vector import Vector2
from .base import EditOperation, OperationResult


@dataclass
class TrimSegment:
    """Teilstück der Ziel-Linie zwischen zwei Parametern."""
    t_start: float
    t_end: float
    start_point: Vector2
    end_point: Vector2

    def contains(self, t: float) -> bool:
        return self.t_start <= t <= self.t_end


@dataclass
class TrimAnalysis:
    """Ergebnis einer Trim-Analyse (ohne Änderung)."""
    line: Line
    click_t: float
    removed_index: int
    segments: List[TrimSegment] = field(default_factory=list)
    cut_points: List[CutPoint] = field(default_factory=list)

    @property
    def removed(self) -> TrimSegment:
        return self.segments[self.removed_index]

    @property
    def kept(self) -> List[TrimSegment]:
        return [s for i, s in enumerate(self.segments) if i != self.removed_index]


class TrimOperation(EditOperation):
    """
    Trim für Lines.

    Trennt Analyse (analyze) von Ausführung (execute).
    Das ermöglicht Preview ohne Änderung an den Entities.
    """

    name = "TRIM"

    def split_parameters(self, cut_points: Sequence[CutPoint]) -> List[float]:
        """
        Sortierte Schnitt-Parameter inklusive 0 und 1.

        Schnittpunkte näher als ``trim_gap`` verschmelzen, Schnitte an den
        Endpunkten erzeugen keine Null-Stücke.
        """
        gap = self.tolerances.trim_gap
        params = [0.0]
        for cut in cut_points:
            t = min(1.0, max(0.0, cut.t))
            if t - params[-1] > gap:
                params.append(t)
        if 1.0 - params[-1] > gap:
            params.append(1.0)
        else:
            params[-1] = 1.0
        return params

    def find_segments(self, line: Line, cutters: Sequence[Entity]) -> Tuple[List[CutPoint], List[TrimSegment]]:
        cut_points = self.calculator.find_all_intersections(line, cutters)
        params = self.split_parameters(cut_points)
        segments = [
            TrimSegment(t0, t1, line.point_at(t0), line.point_at(t1))
            for t0, t1 in zip(params, params[1:])
        ]
        return cut_points, segments

    def analyze(self, entity: Entity, click_point: Vector2,
                cutters: Sequence[Entity]) -> Optional[TrimAnalysis]:
        """
        Bestimmt das zu entfernende Teilstück.

        Returns:
            TrimAnalysis oder None wenn die Linie nicht geschnitten wird

        Raises:
            UnsupportedOperationError: wenn entity keine Line ist
        """
        self._require(entity, (Line,))
        line = entity

        cut_points, segments = self.find_segments(line, cutters)
        if len(segments) < 2:
            self._record(OperationResult.no_intersections())
            return None

        click_t = min(1.0, max(0.0, line.parameter_of(click_point)))
        removed_index = next(i for i, seg in enumerate(segments) if seg.contains(click_t))

        logger.debug(f"[TRIM] {len(cut_points)} Schnittpunkte, {len(segments)} Stücke, "
                     f"entferne Stück {removed_index} (t={click_t:.4f})")
        return TrimAnalysis(line, click_t, removed_index, segments, cut_points)

    def execute(self, entity: Entity, click_point: Vector2, cutters: Sequence[Entity]) -> List[Line]:
        """
        Returns:
            Neue Lines der verbleibenden Stücke; ohne Schnittpunkte [entity]
        """
        analysis = self.analyze(entity, click_point, cutters)
        if analysis is None:
            return [entity]

        pieces = [Line(seg.start_point, seg.end_point, layer=entity.layer) for seg in analysis.kept]
        self._record(OperationResult.ok(f"{len(pieces)} Stücke behalten", pieces))
        return pieces

    def trim_multiple(self, entities: Sequence[Entity], click_point: Vector2,
                      cutters: Sequence[Entity]) -> List[Line]:
        results: List[Line] = []
        for entity in entities:
            results.extend(self.execute(entity, click_point, cutters))
        return results

    def can_trim(self, entity: Entity, cutters: Sequence[Entity]) -> bool:
        if not isinstance(entity, Line):
            return False
        _, segments = self.find_segments(entity, cutters)
        return len(segments) >= 2

    can_execute = can_trim

    @staticmethod
    def valid_cutting_entities(entity: Entity, candidates: Sequence[Entity]) -> List[Entity]:
        """Kandidaten, die als Cutter taugen (Bögen werden nicht geschnitten)."""
        return [
            c for c in candidates
            if c is not entity and isinstance(c, (Line, Circle, Polyline, Rectangle))
        ]
