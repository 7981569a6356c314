"""Reconciliation module.

Decision policy plus the parallel runner that applies it to a library.
"""

from .policy import (
    Finding,
    FindingKind,
    FindingScope,
    reconcile,
    reconcile_tags,
    tag_read_failure,
)
from .runner import (
    ReconciliationReport,
    ReconciliationRunner,
    TrackOutcome,
    file_exists,
)

__all__ = [
    # Policy
    "Finding",
    "FindingKind",
    "FindingScope",
    "reconcile",
    "reconcile_tags",
    "tag_read_failure",
    # Runner
    "ReconciliationReport",
    "ReconciliationRunner",
    "TrackOutcome",
    "file_exists",
]
