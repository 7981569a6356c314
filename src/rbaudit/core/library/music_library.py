"""Read-only access to the Music (iTunes) library export.

Music.app can share its library as an XML property list ("Library.xml").
The file lists every track with its location URL and rating, and every
playlist as an ordered list of track ids.
"""

import logging
import plistlib
import unicodedata
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import unquote, urlparse

from ...models.models import LibraryItem, Track, build_tracks

logger = logging.getLogger(__name__)


class LibraryLoadError(Exception):
    """Raised when the library export cannot be loaded."""

    pass


def location_to_path(location: Optional[str]) -> Optional[str]:
    """Convert a library ``file://`` URL to a filesystem path.

    Args:
        location: Location URL as stored in the library

    Returns:
        Decoded NFC-normalized path, or None if there is no location
    """
    if not location:
        return None

    parsed = urlparse(location)
    if parsed.scheme and parsed.scheme != "file":
        return None

    path = unquote(parsed.path)
    # macOS exports decomposed unicode
    return unicodedata.normalize("NFC", path)


class MusicLibrary:
    """Media library backed by a Library.xml export."""

    def __init__(self, xml_path: Path) -> None:
        """Initialize the library.

        Args:
            xml_path: Path to the exported library property list
        """
        self.xml_path = Path(xml_path)
        self._library: Optional[Dict[str, Any]] = None

    @property
    def library(self) -> Dict[str, Any]:
        """Parsed property list, loaded on first access."""
        if self._library is None:
            self._library = self._load()
        return self._library

    def _load(self) -> Dict[str, Any]:
        if not self.xml_path.exists():
            raise LibraryLoadError(f"Library export not found: {self.xml_path}")

        try:
            with open(self.xml_path, "rb") as f:
                library = plistlib.load(f)
        except (plistlib.InvalidFileException, ValueError, OSError) as e:
            raise LibraryLoadError(
                f"Failed to read library export {self.xml_path}: {e}"
            ) from e

        if not isinstance(library, dict):
            raise LibraryLoadError(f"Unexpected library format in {self.xml_path}")

        logger.info(
            "Loaded library %s with %d tracks",
            self.xml_path,
            len(library.get("Tracks", {})),
        )
        return library

    def version(self) -> str:
        """Version of the application that wrote the export."""
        return str(self.library.get("Application Version", ""))

    def list_all_tracks(self) -> List[LibraryItem]:
        """All library items with a user-set (not computed) rating."""
        items = [
            self._to_item(entry)
            for entry in self.library.get("Tracks", {}).values()
            if not entry.get("Rating Computed", False)
        ]
        logger.debug("Library has %d items with user ratings", len(items))
        return items

    def list_playlist_tracks(self, name: str) -> List[LibraryItem]:
        """Items of the first playlist named ``name``, in playlist order."""
        playlist = next(
            (
                pl
                for pl in self.library.get("Playlists", [])
                if pl.get("Name") == name
            ),
            None,
        )
        if playlist is None:
            logger.warning("Playlist '%s' not found in library", name)
            return []

        tracks = self.library.get("Tracks", {})
        items: List[LibraryItem] = []
        for entry in playlist.get("Playlist Items", []):
            track_id = entry.get("Track ID")
            track = tracks.get(str(track_id))
            if track is None:
                logger.debug(
                    "Playlist '%s' references unknown track %s", name, track_id
                )
                continue
            items.append(self._to_item(track))
        return items

    def all_tracks(self) -> List[Track]:
        """All library items that can be reconciled."""
        return build_tracks(self.list_all_tracks())

    def playlist_tracks(self, name: str) -> List[Track]:
        """Reconcilable tracks of a playlist."""
        return build_tracks(self.list_playlist_tracks(name))

    @staticmethod
    def _to_item(entry: Dict[str, Any]) -> LibraryItem:
        return LibraryItem(
            track_id=int(entry.get("Track ID", 0)),
            location=location_to_path(entry.get("Location")),
            rating=int(entry.get("Rating", 0)),
            rating_computed=bool(entry.get("Rating Computed", False)),
            name=entry.get("Name"),
            artist=entry.get("Artist"),
        )
