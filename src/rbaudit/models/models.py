"""Data models for the rating audit."""

import logging
import os
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.filename import extract_external_id

logger = logging.getLogger(__name__)

ICLOUD_ROOT = "/Mobile Documents/com~apple~CloudDocs"

# Music stores ratings as 0-100 in steps of 20
RATING_SCALE = 20


def scale_rating(raw_rating: int) -> int:
    """Convert a library rating (0-100) to stars (0-5)."""
    return raw_rating // RATING_SCALE


def strip_icloud_root(path: str) -> str:
    """Path below the iCloud Drive root, or the path itself outside it."""
    _, sep, rest = path.partition(ICLOUD_ROOT)
    return rest if sep else path


class LibraryItem(BaseModel):
    """A track entry as exported by the media library."""

    track_id: int
    location: Optional[str] = None
    rating: int = 0  # 0-100, multiples of 20
    rating_computed: bool = False
    name: Optional[str] = None
    artist: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Track(BaseModel):
    """A library track normalized for reconciliation."""

    path: Optional[str] = None
    rating: int = Field(default=0, ge=0, le=5)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_item(cls, item: LibraryItem) -> Optional["Track"]:
        """Build a track from a library item.

        Items without a file location are not representable and yield None.
        """
        if not item.location:
            return None
        return cls(path=item.location, rating=scale_rating(item.rating))

    @property
    def filename(self) -> Optional[str]:
        """Final path segment."""
        if self.path is None:
            return None
        return os.path.basename(self.path)

    @property
    def relative_path(self) -> Optional[str]:
        """Path below the iCloud Drive root, for display."""
        if self.path is None:
            return None
        return strip_icloud_root(self.path)

    @property
    def external_id(self) -> Optional[str]:
        """Catalogue id parsed from the filename."""
        if self.path is None:
            return None
        return extract_external_id(self.path)

    @property
    def stars(self) -> str:
        """Rating rendered as stars."""
        return "*" * self.rating


def build_tracks(items: Iterable[LibraryItem]) -> List[Track]:
    """Convert library items to tracks, dropping items without a location."""
    tracks: List[Track] = []
    dropped = 0
    for item in items:
        track = Track.from_item(item)
        if track is None:
            dropped += 1
            continue
        tracks.append(track)

    if dropped:
        logger.debug("Dropped %d library items without a file location", dropped)
    return tracks


class ExternalRecord(BaseModel):
    """A Rekordbox content row matched by catalogue id."""

    id: str
    filename: str
    rating: int = Field(default=0, ge=0, le=5)
    match_count: int = 1

    model_config = ConfigDict(frozen=True)

    @property
    def is_ambiguous(self) -> bool:
        """Whether more than one row matched the id."""
        return self.match_count > 1
