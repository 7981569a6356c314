"""Reconciliation policy for library, Rekordbox and tag ratings.

Given what is known about one track, decide which discrepancies to report.
Everything here is pure: no lookups, no filesystem access.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ...models.models import ExternalRecord


class FindingKind(str, Enum):
    """Kinds of discrepancies reported for a track."""

    RATING_MISMATCH = "rating_mismatch"
    UNRATED_IN_EXTERNAL_STORE = "unrated_in_external_store"
    NOT_FOUND_IN_EXTERNAL_STORE = "not_found_in_external_store"
    MISSING_FILE = "missing_file"
    LOW_RATING_CANDIDATE = "low_rating_candidate"  # Flagged, never deleted here
    TAG_READ_FAILURE = "tag_read_failure"


class FindingScope(str, Enum):
    """Source the finding was raised against."""

    FILESYSTEM = "filesystem"
    REKORDBOX = "rekordbox"
    TAGS = "tags"


@dataclass(frozen=True)
class Finding:
    """A single reported discrepancy."""

    kind: FindingKind
    path: str
    scope: FindingScope = FindingScope.REKORDBOX
    local_rating: Optional[int] = None
    external_rating: Optional[int] = None
    external_id: Optional[str] = None
    detail: str = ""

    def __str__(self) -> str:
        """Operator-facing message."""
        if self.kind == FindingKind.MISSING_FILE:
            message = f"Does not exist {self.path}"
        elif self.kind == FindingKind.LOW_RATING_CANDIDATE:
            message = f"Delete {self.path} with {self.local_rating} star rating"
        elif self.kind == FindingKind.UNRATED_IN_EXTERNAL_STORE:
            message = f"Rating {self.path} in rekordbox as {self.local_rating}"
        elif self.kind == FindingKind.NOT_FOUND_IN_EXTERNAL_STORE:
            message = f"Not in rekordbox {self.path} with {self.external_id}"
        elif self.kind == FindingKind.RATING_MISMATCH:
            message = (
                f"Different rating for {self.path} in Music {self.local_rating} "
                f"and {self.scope.value} {self.external_rating}"
            )
        else:
            message = f"Cannot read tags for {self.path}"

        if self.detail:
            message += f" ({self.detail})"
        return message


def reconcile(
    path: str,
    exists: Optional[bool],
    local_rating: int,
    external: Optional[ExternalRecord],
    external_id: Optional[str],
) -> List[Finding]:
    """Classify one track against the filesystem and Rekordbox.

    Rules are checked in order and the first one that applies decides:

    1. existence unknown: nothing is reported
    2. file missing: MISSING_FILE, nothing else
    3. one star: LOW_RATING_CANDIDATE, nothing else
    4. no catalogue id: nothing to look up, nothing reported
    5. id not in Rekordbox: NOT_FOUND_IN_EXTERNAL_STORE
    6. rated locally, unrated in Rekordbox: UNRATED_IN_EXTERNAL_STORE
    7. rated locally, rated differently in Rekordbox: RATING_MISMATCH

    Args:
        path: Display path of the track
        exists: Whether the file exists, None if the check failed
        local_rating: Library rating in stars (0 means unrated)
        external: Rekordbox record found for the id, if any
        external_id: Catalogue id parsed from the filename, if any

    Returns:
        Findings for the track (possibly empty)
    """
    if exists is None:
        return []

    if not exists:
        return [
            Finding(
                kind=FindingKind.MISSING_FILE,
                path=path,
                scope=FindingScope.FILESYSTEM,
                local_rating=local_rating,
            )
        ]

    if local_rating == 1:
        return [
            Finding(
                kind=FindingKind.LOW_RATING_CANDIDATE,
                path=path,
                scope=FindingScope.FILESYSTEM,
                local_rating=local_rating,
            )
        ]

    if external_id is None:
        return []

    if external is None:
        return [
            Finding(
                kind=FindingKind.NOT_FOUND_IN_EXTERNAL_STORE,
                path=path,
                local_rating=local_rating,
                external_id=external_id,
            )
        ]

    if local_rating > 0 and external.rating == 0:
        return [
            Finding(
                kind=FindingKind.UNRATED_IN_EXTERNAL_STORE,
                path=path,
                local_rating=local_rating,
                external_rating=0,
                external_id=external_id,
            )
        ]

    if local_rating > 0 and external.rating != local_rating:
        return [
            Finding(
                kind=FindingKind.RATING_MISMATCH,
                path=path,
                local_rating=local_rating,
                external_rating=external.rating,
                external_id=external_id,
            )
        ]

    return []


def reconcile_tags(
    path: str, local_rating: int, tag_rating: Optional[int], source: str = ""
) -> List[Finding]:
    """Compare the library rating with the rating embedded in the file.

    Files the rating source never rated, and tracks unrated in the library,
    produce no finding.
    """
    if local_rating == 0 or tag_rating is None or tag_rating == local_rating:
        return []

    return [
        Finding(
            kind=FindingKind.RATING_MISMATCH,
            path=path,
            scope=FindingScope.TAGS,
            local_rating=local_rating,
            external_rating=tag_rating,
            detail=f"by {source}" if source else "",
        )
    ]


def tag_read_failure(path: str, error: Exception) -> Finding:
    """Finding for a file whose tags could not be read or written."""
    return Finding(
        kind=FindingKind.TAG_READ_FAILURE,
        path=path,
        scope=FindingScope.TAGS,
        detail=str(error),
    )
