"""Batch reconciliation of library tracks.

Tracks are independent: each one is checked on its own worker and its
findings are merged into a single report in completion order.
"""

import logging
import os
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Any, Callable, Dict, List, Optional, Sequence

from ...models.models import ExternalRecord, Track
from ..progress_tracker import ProgressCallback, ProgressTracker
from ..rekordbox.content_store import ContentStoreUnavailableError
from ..tags.tag_service import TagReadError, TagService
from .policy import (
    Finding,
    FindingKind,
    reconcile,
    reconcile_tags,
    tag_read_failure,
)

logger = logging.getLogger(__name__)

ExistsCheck = Callable[[str], Optional[bool]]


def file_exists(path: str) -> Optional[bool]:
    """Check whether a file exists.

    Returns:
        True or False, or None when existence could not be determined
    """
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except (OSError, ValueError) as e:
        logger.debug("Cannot check existence of %s: %s", path, e)
        return None
    return True


@dataclass
class TrackOutcome:
    """Result of reconciling one track."""

    track: Track
    findings: List[Finding] = dataclass_field(default_factory=list)
    external: Optional[ExternalRecord] = None
    lookup_failed: bool = False
    tag_rewritten: bool = False


@dataclass
class ReconciliationReport:
    """Findings of a reconciliation run with statistics."""

    findings: List[Finding] = dataclass_field(default_factory=list)
    tracks_processed: int = 0
    lookup_errors: int = 0
    track_errors: int = 0
    ambiguous_matches: int = 0
    tags_rewritten: int = 0

    def add_outcome(self, outcome: TrackOutcome) -> None:
        """Merge a track outcome and update statistics."""
        self.findings.extend(outcome.findings)
        self.tracks_processed += 1

        if outcome.lookup_failed:
            self.lookup_errors += 1
        if outcome.external is not None and outcome.external.is_ambiguous:
            self.ambiguous_matches += 1
        if outcome.tag_rewritten:
            self.tags_rewritten += 1

    def counts(self) -> Dict[FindingKind, int]:
        """Number of findings per kind."""
        return dict(Counter(finding.kind for finding in self.findings))

    def by_kind(self, kind: FindingKind) -> List[Finding]:
        """Findings of one kind."""
        return [finding for finding in self.findings if finding.kind == kind]

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics."""
        summary: Dict[str, Any] = {
            "tracks_processed": self.tracks_processed,
            "total_findings": len(self.findings),
            "lookup_errors": self.lookup_errors,
            "track_errors": self.track_errors,
            "ambiguous_matches": self.ambiguous_matches,
            "tags_rewritten": self.tags_rewritten,
        }
        for kind in FindingKind:
            summary[kind.value] = 0
        for kind, count in self.counts().items():
            summary[kind.value] = count
        return summary


class ReconciliationRunner:
    """Runs the reconciliation policy over many tracks in parallel."""

    def __init__(
        self,
        content_store: Any,
        tag_service: Optional[TagService] = None,
        max_workers: Optional[int] = None,
        exists_check: ExistsCheck = file_exists,
        fix_tags: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        """Initialize the runner.

        Args:
            content_store: Store providing ``find(external_id)``
            tag_service: Tag service, enables the tag pass when given
            max_workers: Worker count (defaults to the store's pool size)
            exists_check: Tri-state file existence predicate
            fix_tags: Rewrite mismatching tag ratings to the library rating
            progress_callback: Receives progress updates
        """
        self.content_store = content_store
        self.tag_service = tag_service
        self.max_workers = max_workers or getattr(content_store, "pool_size", 8)
        self.exists_check = exists_check
        self.fix_tags = fix_tags
        self.progress_callback = progress_callback

    def process_track(self, track: Track) -> TrackOutcome:
        """Reconcile a single track.

        Lookup and tag errors are contained here and never raised.
        """
        outcome = TrackOutcome(track=track)
        if track.path is None:
            return outcome

        path = track.path
        exists = self.exists_check(path)
        external_id = track.external_id

        if exists and track.rating != 1 and external_id is not None:
            try:
                outcome.external = self.content_store.find(external_id)
            except ContentStoreUnavailableError as e:
                logger.error("Rekordbox lookup failed for %s: %s", path, e)
                outcome.lookup_failed = True
                # Without a lookup result there is nothing to key on
                external_id = None

        outcome.findings.extend(
            reconcile(path, exists, track.rating, outcome.external, external_id)
        )

        # Unrated tracks have nothing to compare, one-star files are only flagged
        if self.tag_service is not None and exists and track.rating > 1:
            self._check_tags(self.tag_service, track, outcome)

        return outcome

    def _check_tags(
        self, tag_service: TagService, track: Track, outcome: TrackOutcome
    ) -> None:
        path = track.path or ""
        source = tag_service.rating_source
        try:
            tag_set = tag_service.read(path)
            findings = reconcile_tags(
                path, track.rating, tag_service.read_rating(tag_set), source
            )
            outcome.findings.extend(findings)

            if findings and self.fix_tags:
                tag_service.stamp_rating(tag_set, track.rating)
                outcome.tag_rewritten = True
        except TagReadError as e:
            logger.warning("%s", e)
            outcome.findings.append(tag_read_failure(path, e))

    def run(self, tracks: Sequence[Track]) -> ReconciliationReport:
        """Reconcile every track and collect the findings.

        Findings are in no particular order. A failing track is logged and
        counted; it never stops the run.
        """
        report = ReconciliationReport()
        tracker = ProgressTracker(callback=self.progress_callback)
        tracker.start(len(tracks))

        logger.info(
            "Reconciling %d tracks with %d workers", len(tracks), self.max_workers
        )

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                pool.submit(self.process_track, track): track for track in tracks
            }
            for future in as_completed(futures):
                track = futures[future]
                try:
                    outcome = future.result()
                except Exception:
                    logger.exception("Failed to reconcile %s", track.path)
                    report.track_errors += 1
                else:
                    report.add_outcome(outcome)
                tracker.update()

        tracker.complete(f"{len(report.findings)} findings")

        if report.lookup_errors:
            logger.error(
                "%d Rekordbox lookups failed, results are incomplete",
                report.lookup_errors,
            )
        logger.info("Reconciliation complete: %s", report.get_summary())
        return report
