"""Operator-invoked actions on audit findings."""

import logging
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from pathlib import Path
from typing import Iterable, List, Tuple

from .reconcile.policy import Finding, FindingKind

logger = logging.getLogger(__name__)


@dataclass
class PruneResult:
    """Result of removing one-star files."""

    dry_run: bool = True
    removed: List[str] = dataclass_field(default_factory=list)
    failed: List[Tuple[str, str]] = dataclass_field(default_factory=list)

    @property
    def removed_count(self) -> int:
        """Number of files removed (or that would be removed)."""
        return len(self.removed)


def remove_low_rated(findings: Iterable[Finding], dry_run: bool = True) -> PruneResult:
    """Delete the files flagged as low rating candidates.

    Only files are removed; the library and Rekordbox entries are left for the
    operator to clean up.

    Args:
        findings: Findings of an audit run (other kinds are ignored)
        dry_run: Only report what would be removed

    Returns:
        Removed paths and failures
    """
    result = PruneResult(dry_run=dry_run)
    for finding in findings:
        if finding.kind != FindingKind.LOW_RATING_CANDIDATE:
            continue

        if dry_run:
            logger.info("[DRY-RUN] Would delete %s", finding.path)
            result.removed.append(finding.path)
            continue

        try:
            Path(finding.path).unlink()
        except OSError as e:
            logger.error("Failed to delete %s: %s", finding.path, e)
            result.failed.append((finding.path, str(e)))
        else:
            logger.info("Deleted %s", finding.path)
            result.removed.append(finding.path)

    return result
