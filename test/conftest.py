import pytest

from config.feature_flags import FEATURE_FLAGS, set_flag
from config.tolerances import reset_tolerance_policy


# Global Feature Flag Defaults - Single Source of Truth for Test Isolation
# ========================================================================
# WICHTIG: Jeder Test muss mit sauberen Feature-Flags starten.
# Diese Defaults müssen mit config/feature_flags.py synchron gehalten werden.
FEATURE_FLAG_DEFAULTS = {
    # Debug-Modi
    "kernel_debug_logging": False,

    # Experimentell
    "line_overlap_detection": False,
}


def _restore_flags():
    for key in list(FEATURE_FLAGS):
        if key not in FEATURE_FLAG_DEFAULTS:
            del FEATURE_FLAGS[key]
    for key, value in FEATURE_FLAG_DEFAULTS.items():
        set_flag(key, value)


@pytest.fixture(autouse=True)
def _global_feature_flag_isolation():
    """
    Globale Feature-Flag-Isolation.

    Stellt sicher, dass jeder Test mit sauberen, deterministischen
    Feature-Flags startet und keine Laufzeit-Flags in andere Tests leckt.
    """
    _restore_flags()
    yield
    _restore_flags()


@pytest.fixture(autouse=True)
def _tolerance_policy_isolation():
    """Jeder Test startet mit der Legacy-Toleranz-Policy."""
    reset_tolerance_policy()
    yield
    reset_tolerance_policy()
