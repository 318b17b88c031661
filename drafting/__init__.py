"""
PlanCad Drafting Module
"""

from config.version import VERSION as __version__

from .vector import Vector2

from .geometry import (
    Entity, Line, Arc, Circle, Polyline, Rectangle,
    EntityType, BoundingBox, SnapType, SnapPoint,
    InvalidGeometryError, UnsupportedOperationError, explode,
)

from .affine import AffineTransform

from .intersection import IntersectionCalculator, IntersectionPoint, CutPoint

from .spatial import QuadTree

from .boundary import (
    BoundaryDetector, DetectedBoundary, RoomLabel, ClassificationRules, Segment,
)
