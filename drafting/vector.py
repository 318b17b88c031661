"""
PlanCad Drafting - Vector2
==========================

Unveränderlicher 2D-Punkt/Vektor. Wertsemantik: Instanzen werden nie
geteilt verändert, jede Operation liefert einen neuen Vektor.
"""

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Vector2:
    """2D-Vektor mit Arithmetik, Normalisierung, Lerp und Rotation."""
    x: float = 0.0
    y: float = 0.0

    def __post_init__(self):
        # NumPy-Skalare und ints in native floats umwandeln
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    # --- Konstruktoren ---

    @classmethod
    def zero(cls) -> 'Vector2':
        return cls(0.0, 0.0)

    @classmethod
    def from_angle(cls, angle: float, length: float = 1.0) -> 'Vector2':
        return cls(math.cos(angle) * length, math.sin(angle) * length)

    @classmethod
    def from_points(cls, start: 'Vector2', end: 'Vector2') -> 'Vector2':
        """Vektor von start nach end."""
        return cls(end.x - start.x, end.y - start.y)

    @classmethod
    def from_tuple(cls, values: Sequence[float]) -> 'Vector2':
        return cls(values[0], values[1])

    # --- Arithmetik ---

    def __add__(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Vector2') -> 'Vector2':
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> 'Vector2':
        return Vector2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> 'Vector2':
        return Vector2(self.x / scalar, self.y / scalar)

    def __neg__(self) -> 'Vector2':
        return Vector2(-self.x, -self.y)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    # --- Metrik ---

    @property
    def length(self) -> float:
        return math.hypot(self.x, self.y)

    @property
    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def normalized(self) -> 'Vector2':
        """Einheitsvektor; der Nullvektor bleibt Nullvektor."""
        length = self.length
        if length == 0.0:
            return Vector2(0.0, 0.0)
        return Vector2(self.x / length, self.y / length)

    def distance_to(self, other: 'Vector2') -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def distance_squared_to(self, other: 'Vector2') -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def dot(self, other: 'Vector2') -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: 'Vector2') -> float:
        """Z-Komponente des 3D-Kreuzprodukts (>0: other liegt links)."""
        return self.x * other.y - self.y * other.x

    def perpendicular(self) -> 'Vector2':
        """Um 90° gegen den Uhrzeigersinn gedreht: (-y, x)."""
        return Vector2(-self.y, self.x)

    # --- Winkel ---

    def angle(self) -> float:
        """Winkel zur X-Achse in Radians (atan2)."""
        return math.atan2(self.y, self.x)

    def angle_to(self, other: 'Vector2') -> float:
        """Ungerichteter Winkel zwischen zwei Vektoren in [0, pi]."""
        denominator = self.length * other.length
        if denominator == 0.0:
            return 0.0
        cos_theta = max(-1.0, min(1.0, self.dot(other) / denominator))
        return math.acos(cos_theta)

    def rotated(self, angle: float, origin: Optional['Vector2'] = None) -> 'Vector2':
        """Rotation um angle (Radians), optional um einen Drehpunkt."""
        ox, oy = (origin.x, origin.y) if origin is not None else (0.0, 0.0)
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        dx = self.x - ox
        dy = self.y - oy
        return Vector2(ox + dx * cos_a - dy * sin_a, oy + dx * sin_a + dy * cos_a)

    def lerp(self, other: 'Vector2', alpha: float) -> 'Vector2':
        return Vector2(self.x + (other.x - self.x) * alpha, self.y + (other.y - self.y) * alpha)

    # --- Vergleich / Export ---

    def equals(self, other: 'Vector2', epsilon: float = 1e-4) -> bool:
        return abs(self.x - other.x) < epsilon and abs(self.y - other.y) < epsilon

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def __repr__(self):
        return f"V({self.x:.4g}, {self.y:.4g})"
