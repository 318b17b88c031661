"""
PlanCad Drafting - Base Classes for Edit Operations
===================================================

Abstrakte Basisklasse für alle Edit-Operationen (Trim, Extend, Offset,
Fillet, Chamfer, Transform, Array).

Operationen sind reine Funktionen über Entities: Eingaben werden nie
verändert, Ergebnisse sind neue Entities. "Kein Ergebnis" (degenerierte
Geometrie, kein Treffer) ist None bzw. [] und wird zusätzlich als
OperationResult in ``last_result`` festgehalten, damit ein UI-Kollaborator
seine eigene Rückmeldung wählen kann.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional, Tuple, Type

from loguru import logger

from config.tolerances import TolerancePolicy, resolve_policy
from ..geometry import Entity, UnsupportedOperationError
from ..intersection import IntersectionCalculator


class ResultStatus(Enum):
    """Status einer Operation."""
    SUCCESS = auto()
    NO_RESULT = auto()  # Degenerierte Geometrie
    NO_INTERSECTIONS = auto()  # Keine Schnittpunkte
    NO_TARGET = auto()  # Keine Grenze/kein Ziel gefunden
    UNSUPPORTED = auto()  # Entity-Variante nicht unterstützt


@dataclass
class OperationResult:
    """
    Strukturiertes Ergebnis einer Edit-Operation.

    Ermöglicht klare Unterscheidung zwischen Erfolg und abgelehnter Operation.
    """
    status: ResultStatus
    message: str = ""
    data: Any = None

    @property
    def success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @classmethod
    def ok(cls, message: str = "", data: Any = None) -> 'OperationResult':
        return cls(ResultStatus.SUCCESS, message, data)

    @classmethod
    def no_result(cls, message: str) -> 'OperationResult':
        return cls(ResultStatus.NO_RESULT, message)

    @classmethod
    def no_intersections(cls, message: str = "Keine Schnittpunkte") -> 'OperationResult':
        return cls(ResultStatus.NO_INTERSECTIONS, message)

    @classmethod
    def no_target(cls, message: str = "Kein Ziel gefunden") -> 'OperationResult':
        return cls(ResultStatus.NO_TARGET, message)

    @classmethod
    def unsupported(cls, message: str) -> 'OperationResult':
        return cls(ResultStatus.UNSUPPORTED, message)


class EditOperation(ABC):
    """
    Abstrakte Basisklasse für Edit-Operationen.

    Jede Operation hat:
    - eine injizierte Toleranz-Policy (Standard: prozessweite Policy)
    - einen IntersectionCalculator mit derselben Policy
    - execute() und ein strukturiertes ``last_result``
    """

    name = "EDIT"

    def __init__(self, tolerances: Optional[TolerancePolicy] = None):
        self._tolerances = tolerances
        self.calculator = IntersectionCalculator(tolerances)
        self._last_result: Optional[OperationResult] = None

    @property
    def tolerances(self) -> TolerancePolicy:
        return resolve_policy(self._tolerances)

    @property
    def last_result(self) -> Optional[OperationResult]:
        """Letztes Ergebnis der Operation."""
        return self._last_result

    def _record(self, result: OperationResult) -> OperationResult:
        self._last_result = result
        if not result.success:
            logger.debug(f"[{self.name}] {result.status.name}: {result.message}")
        return result

    def _decline(self, message: str, status: ResultStatus = ResultStatus.NO_RESULT) -> None:
        """Hält "kein Ergebnis" fest und gibt None zurück."""
        self._record(OperationResult(status, message))
        return None

    def _require(self, entity: Entity, allowed: Tuple[Type[Entity], ...]) -> None:
        """
        Raises:
            UnsupportedOperationError: wenn entity keine der erlaubten Varianten ist
        """
        if isinstance(entity, allowed):
            return
        allowed_names = "/".join(cls.__name__ for cls in allowed)
        message = f"{self.name} unterstützt {allowed_names}, nicht {type(entity).__name__}"
        self._record(OperationResult.unsupported(message))
        logger.warning(f"[{self.name}] {message}")
        raise UnsupportedOperationError(message)

    @abstractmethod
    def execute(self, *args, **kwargs):
        """
        Führt die Operation aus.

        Returns:
            Neue Entities bzw. None/[] wenn die Operation abgelehnt wurde
        """
        pass

    def can_execute(self, *args, **kwargs) -> bool:
        """
        Prüft ob die Operation ausgeführt werden kann.
        Override in Subklassen für Validierung.
        """
        return True
