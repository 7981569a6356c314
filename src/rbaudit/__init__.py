"""Music / Rekordbox rating audit.

Reconciles track ratings between the Music library, the Rekordbox collection
and embedded ID3 tags, and reports the discrepancies for manual fixing.
"""

__version__ = "0.3.0"
__author__ = "Bas"
__email__ = ""

from .config import Config
from .core.reconcile import (
    Finding,
    FindingKind,
    ReconciliationReport,
    ReconciliationRunner,
    reconcile,
)
from .models import ExternalRecord, Track

__all__ = [
    "Config",
    "ExternalRecord",
    "Finding",
    "FindingKind",
    "ReconciliationReport",
    "ReconciliationRunner",
    "Track",
    "reconcile",
]
