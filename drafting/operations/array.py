"""
PlanCad Drafting - Array Operations
===================================

Rechteckige, polare und pfadbasierte Anordnung von Kopien.

Verwendung:
    from drafting.operations import ArrayOperation

    op = ArrayOperation()
    grid = op.rectangular(entities, rows=3, cols=4, row_spacing=10, col_spacing=20)
    ring = op.polar(entities, center=Vector2(0, 0), count=6)
    along = op.path(entities, path_polyline, count=5)
"""

import math
from typing import List, Optional, Sequence, Union

import numpy as np
from loguru import logger

from ..affine import AffineTransform
from ..geometry import Entity, Polyline
from ..vector import Vector2
from .base import EditOperation, OperationResult
from .transform import selection_bounds, transformed_clone


PathSpec = Union[Polyline, Sequence[Vector2]]


class ArrayOperation(EditOperation):
    """Array-Operationen; Zelle/Position 0 enthält Kopien der Originale."""

    name = "ARRAY"

    def execute(self, entities: Sequence[Entity], rows: int, cols: int,
                row_spacing: float, col_spacing: float, row_angle: float = 0.0) -> List[Entity]:
        return self.rectangular(entities, rows, cols, row_spacing, col_spacing, row_angle)

    def rectangular(self, entities: Sequence[Entity], rows: int, cols: int,
                    row_spacing: float, col_spacing: float, row_angle: float = 0.0) -> List[Entity]:
        """
        rows x cols Kopien.

        Spalten liegen entlang +X im Abstand col_spacing. Zeilen liegen
        entlang +Y im Abstand row_spacing, um row_angle (Radians) aus der
        Senkrechten gekippt.
        """
        if rows < 1 or cols < 1:
            self._decline(f"Ungültige Array-Größe {rows}x{cols}")
            return [e.clone() for e in entities]

        col_vec = Vector2(col_spacing, 0.0)
        row_vec = Vector2.from_angle(math.pi / 2.0 + row_angle, row_spacing)

        results: List[Entity] = []
        for row in range(rows):
            for col in range(cols):
                if row == 0 and col == 0:
                    results.extend(e.clone() for e in entities)
                    continue
                offset = col_vec * col + row_vec * row
                matrix = AffineTransform.translation(offset)
                results.extend(transformed_clone(e, matrix) for e in entities)

        logger.debug(f"[ARRAY] Rechteckig {rows}x{cols}: {len(results)} Entities")
        self._record(OperationResult.ok(f"{len(results)} Entities", results))
        return results

    def polar(self, entities: Sequence[Entity], center: Vector2, count: int,
              angle_to_fill: float = 2.0 * math.pi, rotate_items: bool = True) -> List[Entity]:
        """
        count Kopien um center, Schritt = angle_to_fill / count.

        Bei einem Teilbogen bleibt das Ende des Bogens frei.
        Ohne rotate_items wird die Box-Mitte jeder Entity um center
        gedreht und die Entity nur verschoben; die Orientierung bleibt.
        """
        if count < 1:
            self._decline(f"Ungültige Anzahl {count}")
            return [e.clone() for e in entities]

        step = angle_to_fill / count

        results: List[Entity] = []
        for i in range(count):
            angle = step * i
            if rotate_items:
                matrix = AffineTransform.rotation(angle, center)
                results.extend(transformed_clone(e, matrix) for e in entities)
                continue
            for entity in entities:
                own_center = entity.bounding_box().center
                target = own_center.rotated(angle, center)
                results.append(transformed_clone(entity, AffineTransform.translation(target - own_center)))

        logger.debug(f"[ARRAY] Polar {count}x über {math.degrees(angle_to_fill):.1f}°")
        self._record(OperationResult.ok(f"{len(results)} Entities", results))
        return results

    def path(self, entities: Sequence[Entity], path: PathSpec, count: int,
             align_to_path: bool = True) -> List[Entity]:
        """
        count Kopien an gleichmäßig über die Bogenlänge verteilten Stationen.

        Die Box-Mitte der Auswahl wird auf jede Station verschoben; mit
        align_to_path wird zusätzlich um den lokalen Tangentenwinkel gedreht.
        Geschlossene Pfade schließen das letzte Segment ein und setzen
        keine doppelte Kopie auf den Startpunkt.
        """
        if isinstance(path, Polyline):
            points = path.vertices
            closed = path.closed
        else:
            points = list(path)
            closed = False
        if closed:
            points = points + [points[0]]

        bounds = selection_bounds(entities)
        if len(points) < 2 or count < 2 or bounds is None:
            self._decline("Pfad braucht mindestens 2 Punkte und count >= 2")
            return [e.clone() for e in entities]

        coords = np.array([p.as_tuple() for p in points], dtype=float)
        seg_vectors = np.diff(coords, axis=0)
        seg_lengths = np.hypot(seg_vectors[:, 0], seg_vectors[:, 1])
        cumulative = np.concatenate([[0.0], np.cumsum(seg_lengths)])
        total = float(cumulative[-1])
        if total <= self.tolerances.point:
            self._decline("Pfad hat Länge 0")
            return [e.clone() for e in entities]

        spacing = total / count if closed else total / (count - 1)
        stations = np.arange(count) * spacing

        group_center = bounds.center
        results: List[Entity] = []
        for distance in stations:
            index = int(np.searchsorted(cumulative, distance, side="right")) - 1
            index = min(max(index, 0), len(seg_lengths) - 1)
            # Segmente der Länge 0 überspringen (Tangente undefiniert)
            while seg_lengths[index] == 0.0 and index > 0:
                index -= 1
            local = (distance - cumulative[index]) / seg_lengths[index] if seg_lengths[index] > 0.0 else 0.0
            station = Vector2(*(coords[index] + seg_vectors[index] * local))

            matrix = AffineTransform.translation(station - group_center)
            if align_to_path:
                tangent_angle = math.atan2(seg_vectors[index][1], seg_vectors[index][0])
                matrix = AffineTransform.rotation(tangent_angle, station) @ matrix
            results.extend(transformed_clone(e, matrix) for e in entities)

        logger.debug(f"[ARRAY] Pfad {count}x über Länge {total:.3f}")
        self._record(OperationResult.ok(f"{len(results)} Entities", results))
        return results

    def circular(self, entities: Sequence[Entity], center: Vector2, count: int,
                 rotate_items: bool = True) -> List[Entity]:
        """Polar-Array über den Vollkreis."""
        return self.polar(entities, center, count, 2.0 * math.pi, rotate_items)

    def grid(self, entities: Sequence[Entity], rows: int, cols: int, spacing: float,
             origin: Optional[Vector2] = None) -> List[Entity]:
        """Quadratisches Raster, optional mit erster Zelle am origin."""
        source = list(entities)
        if origin is not None:
            bounds = selection_bounds(source)
            if bounds is not None:
                source = [transformed_clone(e, AffineTransform.translation(origin - bounds.min)) for e in source]
        return self.rectangular(source, rows, cols, spacing, spacing)
