"""
PlanCad Drafting - Affine Transformation
========================================

2x3-Matrix in homogener 3x3-Darstellung (numpy):

    | a  c  e |
    | b  d  f |
    | 0  0  1 |

Ein Punkt (x, y) wird zu (a*x + c*y + e, b*x + d*y + f).

Verwendung:
    from drafting.affine import AffineTransform

    m = AffineTransform.rotation(math.pi / 2, pivot=Vector2(1, 0))
    p = m.apply(Vector2(2, 0))
"""

import math
from typing import Optional, Tuple

import numpy as np

from .vector import Vector2


class AffineTransform:
    """Unveränderliche 2D-Affintransformation."""

    __slots__ = ("_m",)

    def __init__(self, matrix=None):
        if matrix is None:
            matrix = np.eye(3)
        m = np.array(matrix, dtype=float)
        if m.shape == (2, 3):
            m = np.vstack([m, [0.0, 0.0, 1.0]])
        if m.shape != (3, 3):
            raise ValueError(f"Affine Matrix braucht Form (2, 3) oder (3, 3), nicht {m.shape}")
        m.setflags(write=False)
        self._m = m

    @classmethod
    def from_coefficients(cls, a: float, b: float, c: float, d: float,
                          e: float, f: float) -> 'AffineTransform':
        return cls([[a, c, e], [b, d, f]])

    @classmethod
    def identity(cls) -> 'AffineTransform':
        return cls()

    @classmethod
    def translation(cls, offset: Vector2) -> 'AffineTransform':
        return cls.from_coefficients(1.0, 0.0, 0.0, 1.0, offset.x, offset.y)

    @classmethod
    def rotation(cls, angle: float, pivot: Optional[Vector2] = None) -> 'AffineTransform':
        """Rotation um angle (Radians, gegen den Uhrzeigersinn) um pivot."""
        px, py = (pivot.x, pivot.y) if pivot is not None else (0.0, 0.0)
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        return cls.from_coefficients(
            cos_a, sin_a, -sin_a, cos_a,
            px - px * cos_a + py * sin_a,
            py - px * sin_a - py * cos_a,
        )

    @classmethod
    def scaling(cls, sx: float, sy: Optional[float] = None,
                base: Optional[Vector2] = None) -> 'AffineTransform':
        """Anisotrope Skalierung um einen Basispunkt."""
        if sy is None:
            sy = sx
        bx, by = (base.x, base.y) if base is not None else (0.0, 0.0)
        return cls.from_coefficients(sx, 0.0, 0.0, sy, bx * (1.0 - sx), by * (1.0 - sy))

    @classmethod
    def mirror(cls, point: Vector2, direction: Vector2) -> Optional['AffineTransform']:
        """
        Householder-Spiegelung an der Geraden durch point mit Richtung direction.

        Returns:
            None bei Null-Richtung (degenerierte Spiegelachse)
        """
        unit = direction.normalized()
        if unit.length == 0.0:
            return None
        dx, dy = unit.x, unit.y
        px, py = point.x, point.y
        return cls.from_coefficients(
            dx * dx - dy * dy,
            2.0 * dx * dy,
            2.0 * dx * dy,
            dy * dy - dx * dx,
            2.0 * px * dy * dy - 2.0 * py * dx * dy,
            2.0 * py * dx * dx - 2.0 * px * dx * dy,
        )

    # --- Komposition ---

    def __matmul__(self, other: 'AffineTransform') -> 'AffineTransform':
        """self @ other: erst other, dann self."""
        return AffineTransform(self._m @ other._m)

    def then(self, other: 'AffineTransform') -> 'AffineTransform':
        """Erst self, dann other."""
        return other @ self

    def inverse(self) -> Optional['AffineTransform']:
        if abs(self.determinant) < 1e-15:
            return None
        return AffineTransform(np.linalg.inv(self._m))

    # --- Anwendung ---

    def apply(self, point: Vector2) -> Vector2:
        x, y, _ = self._m @ np.array([point.x, point.y, 1.0])
        return Vector2(x, y)

    def apply_vector(self, vector: Vector2) -> Vector2:
        """Richtungsvektor (ohne Translation)."""
        x, y = self._m[:2, :2] @ np.array([vector.x, vector.y])
        return Vector2(x, y)

    # --- Eigenschaften ---

    @property
    def coefficients(self) -> Tuple[float, float, float, float, float, float]:
        m = self._m
        return (float(m[0, 0]), float(m[1, 0]), float(m[0, 1]),
                float(m[1, 1]), float(m[0, 2]), float(m[1, 2]))

    @property
    def matrix(self) -> np.ndarray:
        return self._m

    @property
    def determinant(self) -> float:
        return float(np.linalg.det(self._m[:2, :2]))

    @property
    def is_reflection(self) -> bool:
        return self.determinant < 0.0

    @property
    def rotation_angle(self) -> float:
        """Drehwinkel der ersten Spalte: atan2(b, a)."""
        return math.atan2(self._m[1, 0], self._m[0, 0])

    @property
    def scale_factors(self) -> Tuple[float, float]:
        """Spaltennormen (Skalierung in X und Y)."""
        norms = np.linalg.norm(self._m[:2, :2], axis=0)
        return float(norms[0]), float(norms[1])

    @property
    def mean_scale(self) -> float:
        sx, sy = self.scale_factors
        return (sx + sy) / 2.0

    def preserves_axes(self, tol: float = 1e-9) -> bool:
        """True wenn achsparallele Rechtecke achsparallel bleiben (0/90/180/270°, Spiegelung)."""
        a, b, c, d, _, _ = self.coefficients
        return (abs(b) < tol and abs(c) < tol) or (abs(a) < tol and abs(d) < tol)

    def __eq__(self, other):
        if not isinstance(other, AffineTransform):
            return NotImplemented
        return bool(np.allclose(self._m, other._m))

    def __hash__(self):
        return hash(tuple(round(v, 12) for v in self.coefficients))

    def __repr__(self):
        a, b, c, d, e, f = self.coefficients
        return f"AffineTransform(a={a:.4g}, b={b:.4g}, c={c:.4g}, d={d:.4g}, e={e:.4g}, f={f:.4g})"
