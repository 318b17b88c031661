"""
PlanCad Drafting - Edit Operations
==================================

Trim, Extend, Offset, Fillet, Chamfer, Transform und Array.
Jede Operation ist eine eigenständige Klasse mit klarer Schnittstelle
und liefert neue Entities; die Eingaben bleiben unverändert.

Verwendung:
    from drafting.operations import TrimOperation

    op = TrimOperation()
    pieces = op.execute(target, click_point, cutters)

    if not op.last_result.success:
        print(op.last_result.message)
"""

from .base import EditOperation, OperationResult, ResultStatus, UnsupportedOperationError
from .trim import TrimOperation, TrimAnalysis, TrimSegment
from .extend import ExtendOperation, ExtendData
from .offset import OffsetOperation, OffsetSide
from .fillet import FilletOperation, FilletResult, CornerData, find_corner
from .chamfer import ChamferOperation, ChamferResult
from .transform import TransformOperation, Alignment, DistributeAxis, transformed_clone
from .array import ArrayOperation

__all__ = [
    # Core
    'EditOperation',
    'OperationResult',
    'ResultStatus',
    'UnsupportedOperationError',
    # Trim
    'TrimOperation',
    'TrimAnalysis',
    'TrimSegment',
    # Extend
    'ExtendOperation',
    'ExtendData',
    # Offset
    'OffsetOperation',
    'OffsetSide',
    # Fillet
    'FilletOperation',
    'FilletResult',
    'CornerData',
    'find_corner',
    # Chamfer
    'ChamferOperation',
    'ChamferResult',
    # Transform
    'TransformOperation',
    'Alignment',
    'DistributeAxis',
    'transformed_clone',
    # Array
    'ArrayOperation',
]
