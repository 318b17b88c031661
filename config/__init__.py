"""
PlanCad - Configuration Module
==============================

Zentrale Konfiguration: Toleranzen, Feature Flags, Version.
"""

from .tolerances import (
    Tolerances, TolerancePolicy, get_tolerance_policy, set_tolerance_policy,
    reset_tolerance_policy, validate_tolerances,
)
from .feature_flags import is_enabled, set_flag, get_all_flags, FEATURE_FLAGS
from .version import VERSION
