"""
PlanCad - Feature Flags
=======================

Feature Flags schalten Debug-Ausgaben und experimentelles Kern-Verhalten.
Neue Verhaltensänderungen werden mit Flag=False eingeführt und erst nach
Validierung zum Standard.
"""

from typing import Dict

# Feature Flag Registry
# =====================
# Offene Fragen bleiben per Flag entscheidbar, ohne den Legacy-Pfad
# zu verändern.

FEATURE_FLAGS: Dict[str, bool] = {
    # Debug-Modi
    "kernel_debug_logging": False,  # Schritt-für-Schritt Logging ([BOUNDARY] Walk, [QUADTREE] Split)

    # Experimentell
    "line_overlap_detection": False,  # Kollineare Überlappung als Schnittpunkte melden
}


def is_enabled(flag: str) -> bool:
    """
    Prüft ob ein Feature-Flag aktiviert ist.

    Args:
        flag: Name des Feature-Flags

    Returns:
        True wenn aktiviert, False wenn nicht aktiviert oder unbekannt
    """
    return FEATURE_FLAGS.get(flag, False)


def set_flag(flag: str, value: bool) -> None:
    """
    Setzt ein Feature-Flag zur Laufzeit.
    Nützlich für Tests und Debugging.
    """
    FEATURE_FLAGS[flag] = value


def get_all_flags() -> Dict[str, bool]:
    """Gibt alle Feature-Flags zurück."""
    return FEATURE_FLAGS.copy()
