"""Parser for the canonical track filename.

Downloaded tracks are named ``[<ordinal>. ]<title> -- <artist> [<id>].mp3``.
The bracketed digits are the catalogue id that Rekordbox also carries in its
own filename column, which makes it the join key between the two sources.
"""

import os
import re
from dataclasses import dataclass
from typing import Optional

FILENAME_PATTERN = re.compile(r"^(?:(\d+)\.\s)?(.+)\s--\s(.+)?\s\[(\d+)]\.mp3$")


@dataclass(frozen=True)
class FilenameCaptures:
    """Captured parts of a canonical filename."""

    ordinal: Optional[str]
    title: str
    artist: Optional[str]
    external_id: str

    def group(self, index: int) -> Optional[str]:
        """Return a capture by its fixed position (1-4)."""
        groups = (self.ordinal, self.title, self.artist, self.external_id)
        if not 1 <= index <= len(groups):
            raise IndexError(f"No capture group {index}")
        return groups[index - 1]


def parse_filename(filename: str) -> Optional[FilenameCaptures]:
    """Parse a filename (final path segment) into its captures.

    Args:
        filename: File name without directories

    Returns:
        Captures, or None when the name does not have the canonical shape
    """
    match = FILENAME_PATTERN.match(filename)
    if match is None:
        return None

    ordinal, title, artist, external_id = match.groups()
    return FilenameCaptures(
        ordinal=ordinal,
        title=title,
        artist=artist,
        external_id=external_id,
    )


def extract_external_id(path: str) -> Optional[str]:
    """Get the bracketed catalogue id from a file path."""
    captures = parse_filename(os.path.basename(path))
    return captures.external_id if captures else None
