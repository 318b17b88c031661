"""
PlanCad - Version
=================

Einzige Quelle der Versionsnummer; pyproject.toml liest VERSION von hier.
"""

VERSION = "0.1.0"
