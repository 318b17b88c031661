"""
PlanCad - Zentralisierte Toleranz-Konfiguration
================================================

Alle Toleranzen des Zeichenkerns an einem Ort.

Toleranz-Philosophie:
- Kreuzprodukte (Parallelität): 1e-10 - numerische Stabilität
- Punkt-/Distanz-Vergleiche: 1e-6 - Zeichnungseinheiten
- Raum-Erkennung: 0.01 - Wände werden selten exakt gezeichnet
- Picking: 0.1 - Klick-Toleranz in Weltkoordinaten

Die Legacy-Werte sind absolut. Für Zeichnungen mit sehr großen oder sehr
kleinen Koordinaten kann eine skalierungs-relative Policy aktiviert werden.

Verwendung:
    from config.tolerances import Tolerances, get_tolerance_policy

    # Direkt als Klassenvariablen
    eps = Tolerances.CROSS_PARALLEL

    # Oder als injizierbare Policy
    policy = get_tolerance_policy()
    calc = IntersectionCalculator(tolerances=policy)
"""

import math
from dataclasses import dataclass, replace
from typing import List, Optional

from loguru import logger


class Tolerances:
    """
    Zentrale Toleranz-Konstanten für PlanCad.

    Kategorien:
    - CROSS_*/DISCRIMINANT: Numerik der Schnittpunkt-Berechnung
    - POINT_*/TRIM_*: Distanz-Vergleiche in Zeichnungseinheiten
    - ANGLE_*/POLYLINE_*: Winkel-Toleranzen für Fillet/Chamfer/Offset
    - BOUNDARY_*: Raum-Erkennung
    - QUADTREE_*/EXTEND_*/PICK_*: Index und Werkzeug-Defaults
    - RELATIVE_*: skalierungs-relativer Modus
    """

    # =========================================================================
    # Numerik (Schnittpunkte)
    # =========================================================================

    # |r x s| unterhalb dieses Werts gilt als parallel/kollinear
    CROSS_PARALLEL = 1e-10

    # Diskriminante nahe Null = Tangente (ein Schnittpunkt)
    DISCRIMINANT = 1e-9

    # =========================================================================
    # Distanz-Vergleiche
    # =========================================================================

    # Punkt-Vergleich (sind zwei Punkte "gleich"?)
    POINT_COINCIDENT = 1e-6

    # Minimaler Parameter-Abstand zwischen zwei Trim-Schnittpunkten
    TRIM_SEGMENT_GAP = 1e-6

    # =========================================================================
    # Winkel
    # =========================================================================

    # Linien mit Winkel < 0.001 rad (oder > pi - 0.001) sind für Fillet/Chamfer parallel
    ANGLE_PARALLEL = 1e-3

    # Offset-Segmente gelten unterhalb dieses Kreuzprodukts als parallel
    POLYLINE_MITER_PARALLEL = 1e-4

    # =========================================================================
    # Raum-Erkennung
    # =========================================================================

    # Endpunkte näher als 0.01 gelten als verbunden
    BOUNDARY_MATCH = 0.01

    # Kleinere Flächen sind Artefakte, keine Räume
    BOUNDARY_MIN_AREA = 0.01

    # =========================================================================
    # Index und Werkzeuge
    # =========================================================================

    # Standard-Toleranz für Punkt-Abfragen (Picking)
    PICK_POINT = 0.1

    # Strahl-Länge beim Verlängern
    EXTEND_RAY_LENGTH = 10000.0

    # Rand beim Quadtree-Rebuild (Anteil der größeren Seite)
    QUADTREE_PADDING = 0.1

    # Halbe Kantenlänge des Quadtree-Bereichs ohne Entities
    QUADTREE_EMPTY_EXTENT = 1000.0

    # =========================================================================
    # Skalierungs-relativer Modus
    # =========================================================================

    # Distanz-Toleranz = Ausdehnung * Faktor, begrenzt auf [Basis, Maximum]
    RELATIVE_SCALE_FACTOR = 1e-9
    RELATIVE_MAX_DISTANCE = 1e-2


@dataclass(frozen=True)
class TolerancePolicy:
    """
    Ein konsistenter Satz Toleranzen, der in den Kern injiziert wird.

    Jede Komponente (IntersectionCalculator, QuadTree, Operationen,
    BoundaryDetector) nimmt ``tolerances=`` entgegen und fällt sonst auf
    ``get_tolerance_policy()`` zurück.
    """
    cross: float = Tolerances.CROSS_PARALLEL
    discriminant: float = Tolerances.DISCRIMINANT
    point: float = Tolerances.POINT_COINCIDENT
    trim_gap: float = Tolerances.TRIM_SEGMENT_GAP
    angle: float = Tolerances.ANGLE_PARALLEL
    miter_parallel: float = Tolerances.POLYLINE_MITER_PARALLEL
    boundary_match: float = Tolerances.BOUNDARY_MATCH
    boundary_min_area: float = Tolerances.BOUNDARY_MIN_AREA
    pick: float = Tolerances.PICK_POINT
    extend_ray: float = Tolerances.EXTEND_RAY_LENGTH
    relative: bool = False
    relative_factor: float = Tolerances.RELATIVE_SCALE_FACTOR
    relative_max: float = Tolerances.RELATIVE_MAX_DISTANCE

    @classmethod
    def legacy(cls) -> 'TolerancePolicy':
        """Absolute Legacy-Werte (Standard)."""
        return cls()

    @classmethod
    def scale_relative(cls, factor: float = Tolerances.RELATIVE_SCALE_FACTOR,
                       max_distance: float = Tolerances.RELATIVE_MAX_DISTANCE) -> 'TolerancePolicy':
        """Distanz-Toleranzen wachsen mit der Ausdehnung der beteiligten Geometrie."""
        return cls(relative=True, relative_factor=factor, relative_max=max_distance)

    def for_extent(self, extent: float) -> 'TolerancePolicy':
        """
        Leitet eine Policy für Geometrie der gegebenen Ausdehnung ab.

        Im Legacy-Modus wird die Policy unverändert zurückgegeben.
        """
        if not self.relative or not math.isfinite(extent) or extent <= 0.0:
            return self

        def _scaled(base: float) -> float:
            return max(base, min(self.relative_max, extent * self.relative_factor))

        return replace(self, point=_scaled(self.point), trim_gap=_scaled(self.trim_gap))


_default_policy: TolerancePolicy = TolerancePolicy.legacy()


def get_tolerance_policy() -> TolerancePolicy:
    """Gibt die prozessweite Standard-Policy zurück."""
    return _default_policy


def set_tolerance_policy(policy: TolerancePolicy) -> None:
    """Setzt die prozessweite Standard-Policy (z.B. für Tests)."""
    global _default_policy
    _default_policy = policy
    logger.debug(f"[TOLERANCES] Policy gesetzt (relative={policy.relative})")


def reset_tolerance_policy() -> None:
    """Zurück zu den Legacy-Werten."""
    set_tolerance_policy(TolerancePolicy.legacy())


def resolve_policy(policy: Optional[TolerancePolicy]) -> TolerancePolicy:
    return policy if policy is not None else _default_policy


# =============================================================================
# Toleranz-Validierung (für Debugging)
# =============================================================================

def validate_tolerances() -> List[str]:
    """
    Validiert dass alle Toleranzen sinnvolle Werte haben.
    Nützlich für Tests und Debugging.
    """
    issues = []

    # Kreuzprodukt-Toleranz muss deutlich unter der Punkt-Toleranz liegen
    if Tolerances.CROSS_PARALLEL >= Tolerances.POINT_COINCIDENT:
        issues.append(
            f"CROSS_PARALLEL ({Tolerances.CROSS_PARALLEL}) nicht kleiner als "
            f"POINT_COINCIDENT ({Tolerances.POINT_COINCIDENT})"
        )

    # Raum-Toleranz sollte zwischen 1e-4 und 1.0 liegen
    if not (1e-4 <= Tolerances.BOUNDARY_MATCH <= 1.0):
        issues.append(f"BOUNDARY_MATCH außerhalb sinnvoller Grenzen: {Tolerances.BOUNDARY_MATCH}")

    # Winkel-Toleranz in Radians, nicht Grad
    if not (0.0 < Tolerances.ANGLE_PARALLEL < 0.1):
        issues.append(f"ANGLE_PARALLEL außerhalb sinnvoller Grenzen: {Tolerances.ANGLE_PARALLEL}")

    if Tolerances.RELATIVE_MAX_DISTANCE < Tolerances.POINT_COINCIDENT:
        issues.append(
            f"RELATIVE_MAX_DISTANCE ({Tolerances.RELATIVE_MAX_DISTANCE}) kleiner als "
            f"POINT_COINCIDENT ({Tolerances.POINT_COINCIDENT})"
        )

    return issues


# Automatische Validierung beim Import (nur Warnung, kein Fehler)
for _issue in validate_tolerances():
    logger.warning(f"Toleranz-Validierung: {_issue}")
