"""
PlanCad Drafting - Boundary Detection
=====================================

Findet geschlossene Polygone ("Räume") in einer gemischten Menge aus
Line, Polyline und Rectangle und ordnet ihnen über eine Flächen-Heuristik
eine Raum-Art zu.

Ablauf:
1. Entities in gerichtete Segmente zerlegen (Line: 1, Polyline: N-1 bzw.
   N, Rectangle: 4). Arc und Circle bilden keine Wände.
2. Ab jedem unbenutzten Segment einen Weg verfolgen, bis er zum Start
   zurückkehrt (geschlossen), abreißt (offene Kette) oder die
   Sicherheitsgrenze von 2 x Segmentanzahl Schritten erreicht.
3. Geschlossene Wege mit >= 3 Punkten und Fläche > min_area werden zu
   DetectedBoundary.

Segmente sind unveränderlich; die Laufrichtung steht im Traversal-Zustand
(segment_index, forward). Die Eingabe-Entities werden nie verändert.

Verwendung:
    from drafting.boundary import BoundaryDetector

    detector = BoundaryDetector()
    rooms = detector.classify(detector.detect(entities))
    rooms = detector.update(edited_entities, rooms)  # Labels übernehmen
"""

import math
import sys
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from loguru import logger
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon as ShapelyPolygon

from config.feature_flags import is_enabled
from config.tolerances import TolerancePolicy, resolve_policy
from .geometry import BoundingBox, Entity, Line, Polyline, Rectangle
from .vector import Vector2


class RoomLabel(Enum):
    """Raum-Arten der Flächen-Heuristik"""
    UNDEFINED = "undefined"
    LIVING_ROOM = "living_room"
    BEDROOM = "bedroom"
    BATHROOM = "bathroom"
    CLOSET = "closet"


@dataclass(frozen=True)
class Segment:
    """Gerichtete Kante einer Wand-Entity."""
    start: Vector2
    end: Vector2
    source: Entity

    def reversed(self) -> 'Segment':
        return Segment(self.end, self.start, self.source)

    def endpoint(self, forward: bool) -> Vector2:
        """Endpunkt in Laufrichtung."""
        return self.end if forward else self.start


@dataclass
class DetectedBoundary:
    """Geschlossenes Polygon aus verbundenen Segmenten."""
    vertices: List[Vector2]
    area: float
    label: RoomLabel = RoomLabel.UNDEFINED
    name: Optional[str] = None
    label_locked: bool = False

    def to_polygon(self) -> ShapelyPolygon:
        return ShapelyPolygon([v.as_tuple() for v in self.vertices])

    @property
    def centroid(self) -> Vector2:
        """Flächenschwerpunkt (Position des Raum-Labels)."""
        c = self.to_polygon().centroid
        return Vector2(c.x, c.y)

    @property
    def perimeter(self) -> float:
        count = len(self.vertices)
        return sum(self.vertices[i].distance_to(self.vertices[(i + 1) % count]) for i in range(count))

    @property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.vertices)

    def contains_point(self, point: Vector2) -> bool:
        """Punkt im Inneren oder auf dem Rand."""
        return self.to_polygon().covers(ShapelyPoint(point.x, point.y))


@dataclass(frozen=True)
class ClassificationRules:
    """
    Schwellwerte der Flächen-Heuristik (Zeichnungseinheiten²).

    Die Heuristik ist eine grobe Vorbelegung, keine geometrische
    Aussage; gesperrte Labels (label_locked) werden nie überschrieben.
    """
    secondary_min: float = 100.0
    secondary_max: float = 300.0
    secondary_slots: int = 3
    bathroom_max: float = 50.0
    closet_max: float = 30.0


def shoelace_area(vertices: Sequence[Vector2]) -> float:
    """Betrag der Polygonfläche."""
    count = len(vertices)
    if count < 3:
        return 0.0
    area = 0.0
    for i in range(count):
        a, b = vertices[i], vertices[(i + 1) % count]
        area += a.x * b.y - b.x * a.y
    return abs(area) / 2.0


class _EndpointGrid:
    """
    Raster über alle Segment-Endpunkte mit Zellgröße = Toleranz.

    Ein Treffer innerhalb der Toleranz liegt immer in der eigenen oder
    einer Nachbarzelle.
    """

    def __init__(self, segments: Sequence[Segment], tolerance: float):
        self.tolerance = tolerance
        self._cells: Dict[Tuple[int, int], List[int]] = {}
        for index, segment in enumerate(segments):
            for point in (segment.start, segment.end):
                bucket = self._cells.setdefault(self._key(point), [])
                if not bucket or bucket[-1] != index:
                    bucket.append(index)

    def _key(self, point: Vector2) -> Tuple[int, int]:
        return (math.floor(point.x / self.tolerance), math.floor(point.y / self.tolerance))

    def candidates(self, point: Vector2) -> List[int]:
        kx, ky = self._key(point)
        found: Set[int] = set()
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                found.update(self._cells.get((kx + dx, ky + dy), ()))
        return sorted(found)


class BoundaryDetector:
    """Raum-Erkennung über Segment-Graph-Traversierung."""

    def __init__(self, tolerances: Optional[TolerancePolicy] = None):
        self._tolerances = tolerances

    @property
    def tolerances(self) -> TolerancePolicy:
        return resolve_policy(self._tolerances)

    def _match(self, a: Vector2, b: Vector2) -> bool:
        return a.distance_to(b) < self.tolerances.boundary_match

    # === Segmente ===

    def segments_from(self, entities: Iterable[Entity]) -> List[Segment]:
        segments: List[Segment] = []
        for entity in entities:
            if isinstance(entity, Line):
                segments.append(Segment(entity.start, entity.end, entity))
            elif isinstance(entity, Polyline):
                for i in range(entity.segment_count):
                    start, end = entity.segment(i)
                    segments.append(Segment(start, end, entity))
            elif isinstance(entity, Rectangle):
                corners = entity.corners()
                for i in range(4):
                    segments.append(Segment(corners[i], corners[(i + 1) % 4], entity))
            else:
                logger.debug(f"[BOUNDARY] {entity.entity_type.name} ist keine Wand, ignoriert")
        return segments

    # === Erkennung ===

    def detect(self, entities: Iterable[Entity]) -> List[DetectedBoundary]:
        """
        Findet alle geschlossenen Räume.

        Returns:
            DetectedBoundary in Fundreihenfolge (unklassifiziert)
        """
        segments = self.segments_from(entities)
        if not segments:
            return []

        grid = _EndpointGrid(segments, self.tolerances.boundary_match)
        used: Set[int] = set()
        boundaries: List[DetectedBoundary] = []

        for seed in range(len(segments)):
            if seed in used:
                continue
            points = self._trace(segments, seed, used, grid)
            if points is None:
                continue
            vertices = points[:-1]  # letzter Punkt = Startpunkt
            if len(vertices) < 3:
                continue
            area = shoelace_area(vertices)
            if area <= self.tolerances.boundary_min_area:
                logger.debug(f"[BOUNDARY] Schleife mit Fläche {area:.6f} verworfen")
                continue
            boundaries.append(DetectedBoundary(vertices, area))

        logger.debug(f"[BOUNDARY] {len(segments)} Segmente, {len(boundaries)} Räume")
        return boundaries

    def _trace(self, segments: Sequence[Segment], seed: int, used: Set[int],
               grid: _EndpointGrid) -> Optional[List[Vector2]]:
        """
        Verfolgt einen Weg ab segments[seed].

        Returns:
            Punktfolge inklusive wiederholtem Startpunkt oder None
        """
        debug = is_enabled("kernel_debug_logging")
        points = [segments[seed].start]
        current, forward = seed, True

        for _ in range(2 * len(segments)):
            used.add(current)
            point = segments[current].endpoint(forward)
            points.append(point)

            if len(points) > 2 and self._match(point, points[0]):
                if debug:
                    logger.debug(f"[BOUNDARY] Schleife ab Segment {seed} geschlossen ({len(points) - 1} Punkte)")
                return points

            step = self._next_segment(segments, point, used, current, grid)
            if step is None:
                if debug:
                    logger.debug(f"[BOUNDARY] Offene Kette ab Segment {seed}, Abbruch bei {point!r}")
                return None
            current, forward = step
            if debug:
                logger.debug(f"[BOUNDARY] -> Segment {current} ({'vorwärts' if forward else 'rückwärts'})")

        logger.debug(f"[BOUNDARY] Iterationsgrenze ab Segment {seed} erreicht")
        return None

    def _next_segment(self, segments: Sequence[Segment], point: Vector2, used: Set[int],
                      current: int, grid: _EndpointGrid) -> Optional[Tuple[int, bool]]:
        """Unbenutztes Segment mit kleinstem Index, das an point anschließt."""
        for index in grid.candidates(point):
            if index == current or index in used:
                continue
            segment = segments[index]
            if self._match(segment.start, point):
                return index, True
            if self._match(segment.end, point):
                return index, False
        return None

    # === Klassifizierung ===

    def classify(self, boundaries: Sequence[DetectedBoundary],
                 rules: Optional[ClassificationRules] = None) -> List[DetectedBoundary]:
        """
        Vergibt Raum-Arten nach Fläche.

        Der größte Raum wird Wohnzimmer; unter den nächsten
        ``secondary_slots`` werden Flächen in [secondary_min, secondary_max)
        Schlafzimmer. Übrige unbelegte Räume: < closet_max Abstellraum,
        sonst < bathroom_max Bad.

        Returns:
            Neue Boundaries, absteigend nach Fläche sortiert
        """
        rules = rules or ClassificationRules()
        ordered = [replace(b, vertices=list(b.vertices))
                   for b in sorted(boundaries, key=lambda b: b.area, reverse=True)]

        def _assign(boundary: DetectedBoundary, label: RoomLabel) -> None:
            if not boundary.label_locked:
                boundary.label = label

        if ordered:
            _assign(ordered[0], RoomLabel.LIVING_ROOM)
        for boundary in ordered[1:1 + rules.secondary_slots]:
            if rules.secondary_min <= boundary.area < rules.secondary_max:
                _assign(boundary, RoomLabel.BEDROOM)

        for boundary in ordered:
            if boundary.label_locked or boundary.label != RoomLabel.UNDEFINED:
                continue
            if boundary.area < rules.closet_max:
                boundary.label = RoomLabel.CLOSET
            elif boundary.area < rules.bathroom_max:
                boundary.label = RoomLabel.BATHROOM

        logger.debug(f"[BOUNDARY] Klassifiziert: {[b.label.value for b in ordered]}")
        return ordered

    def update(self, entities: Iterable[Entity],
               previous: Sequence[DetectedBoundary]) -> List[DetectedBoundary]:
        """
        Erkennt neu und übernimmt Label, Name und Sperre vom ersten alten
        Raum, der den Schwerpunkt des neuen Raums enthält.
        """
        boundaries = self.detect(entities)
        carried = 0
        for boundary in boundaries:
            center = boundary.centroid
            for old in previous:
                if old.contains_point(center):
                    boundary.label = old.label
                    boundary.name = old.name
                    boundary.label_locked = old.label_locked
                    carried += 1
                    break
        logger.debug(f"[BOUNDARY] Update: {carried}/{len(boundaries)} Labels übernommen")
        return boundaries


if __name__ == "__main__":
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")

    plan = [
        Rectangle(Vector2(0, 0), Vector2(20, 15)),
        Rectangle(Vector2(20, 0), Vector2(32, 12)),
        Polyline([Vector2(32, 0), Vector2(38, 0), Vector2(38, 7), Vector2(32, 7)], closed=True),
        Line(Vector2(0, 15), Vector2(5, 15)),
        Line(Vector2(5, 15), Vector2(5, 20)),
        Line(Vector2(5, 20), Vector2(0, 20)),
        Line(Vector2(0, 20), Vector2(0, 15)),
    ]
    detector = BoundaryDetector()
    for room in detector.classify(detector.detect(plan)):
        logger.info(f"{room.label.value:12s} Fläche {room.area:8.2f}  Schwerpunkt {room.centroid!r}")
