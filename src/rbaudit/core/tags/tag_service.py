"""ID3 rating and grouping tags.

Ratings are stored in POPM (popularimeter) frames keyed by an email-like
source label. Grouping uses the TIT1 (content group) frame.
"""

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple, Union

from mutagen import MutagenError
from mutagen.id3 import ID3, POPM, TIT1, ID3NoHeaderError

logger = logging.getLogger(__name__)

# Star rating to POPM byte, as written by Windows Media Player and most taggers
STARS_TO_POPM = {0: 0, 1: 1, 2: 64, 3: 128, 4: 196, 5: 255}


class TagReadError(Exception):
    """Raised when tags cannot be read from or written to a file."""

    pass


def popm_to_stars(value: int) -> int:
    """Convert a POPM rating byte (0-255) to stars (0-5)."""
    if value <= 0:
        return 0
    if value < 32:
        return 1
    if value < 96:
        return 2
    if value < 160:
        return 3
    if value < 224:
        return 4
    return 5


def stars_to_popm(stars: int) -> int:
    """Convert stars (0-5) to a POPM rating byte."""
    if stars not in STARS_TO_POPM:
        raise ValueError(f"Rating must be between 0 and 5, got {stars}")
    return STARS_TO_POPM[stars]


def year_week(day: Optional[date] = None) -> str:
    """Two-digit ISO year followed by the two-digit ISO week, e.g. "2550"."""
    day = day or date.today()
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year % 100:02d}{iso_week:02d}"


class TagSet:
    """ID3 tags of one file."""

    def __init__(self, path: Path, tags: ID3) -> None:
        """Initialize the tag set.

        Args:
            path: File the tags were read from
            tags: Loaded (or empty) ID3 tags
        """
        self.path = path
        self.tags = tags

    def popularity(self, source: str) -> Optional[Tuple[str, int]]:
        """Rating set by ``source``.

        Returns:
            Tuple of (source label, stars), or None if the source never rated
        """
        for frame in self.tags.getall("POPM"):
            if frame.email == source:
                return frame.email, popm_to_stars(frame.rating)
        return None

    def set_popularity(self, source: str, stars: int) -> None:
        """Replace the rating frame of ``source``."""
        count = 0
        existing = self.tags.getall(f"POPM:{source}")
        if existing:
            count = getattr(existing[0], "count", 0)
        self.tags.delall(f"POPM:{source}")
        self.tags.add(POPM(email=source, rating=stars_to_popm(stars), count=count))

    @property
    def grouping(self) -> Optional[str]:
        """Content group (TIT1) text."""
        frame = self.tags.get("TIT1")
        if frame is None or not frame.text:
            return None
        return str(frame.text[0])

    @grouping.setter
    def grouping(self, value: str) -> None:
        self.tags.setall("TIT1", [TIT1(encoding=3, text=[value])])

    def rating_sources(self) -> List[str]:
        """Labels of every POPM frame in the file."""
        return [frame.email for frame in self.tags.getall("POPM")]


class TagService:
    """Reads and writes rating tags with mutagen."""

    def __init__(self, rating_source: str = "itunes") -> None:
        """Initialize the tag service.

        Args:
            rating_source: POPM label whose rating is compared to the library
        """
        self.rating_source = rating_source

    def read(self, path: Union[str, Path]) -> TagSet:
        """Read the ID3 tags of a file.

        Files without an ID3 header yield an empty tag set.

        Raises:
            TagReadError: If the file cannot be read
        """
        path = Path(path)
        try:
            tags = ID3(str(path))
        except ID3NoHeaderError:
            logger.debug("No ID3 header in %s", path)
            tags = ID3()
        except (MutagenError, OSError) as e:
            raise TagReadError(f"Cannot read ID3 for {path}: {e}") from e
        return TagSet(path, tags)

    def read_rating(self, tag_set: TagSet) -> Optional[int]:
        """Rating of the configured source in stars, if present."""
        popularity = tag_set.popularity(self.rating_source)
        if popularity is None:
            return None
        return popularity[1]

    def write(self, tag_set: TagSet) -> None:
        """Save a tag set back to its file.

        Raises:
            TagReadError: If the file cannot be written
        """
        try:
            tag_set.tags.save(str(tag_set.path))
        except (MutagenError, OSError) as e:
            raise TagReadError(f"Failed to write {tag_set.path}: {e}") from e

    def stamp_rating(
        self, tag_set: TagSet, stars: int, grouping: Optional[str] = None
    ) -> None:
        """Set the source rating and a provenance grouping, then save."""
        tag_set.set_popularity(self.rating_source, stars)
        tag_set.grouping = grouping or year_week()
        self.write(tag_set)
        logger.info(
            "Rewrote %s rating of %s to %d", self.rating_source, tag_set.path, stars
        )
