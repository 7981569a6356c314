"""Helpers shared by CLI commands."""

import logging
from typing import List, Optional

import click

from ...config import Config
from ...core.library import LibraryLoadError, MusicLibrary
from ...models import Track

logger = logging.getLogger(__name__)


def open_library(config: Config) -> MusicLibrary:
    """Open the configured library export or fail the command."""
    library = MusicLibrary(config.library_xml)
    try:
        library.version()
    except LibraryLoadError as e:
        raise click.ClickException(str(e)) from e
    return library


def load_tracks(library: MusicLibrary, playlist: Optional[str]) -> List[Track]:
    """Tracks of one playlist, or of the whole library."""
    if playlist:
        tracks = library.playlist_tracks(playlist)
        if not tracks:
            raise click.ClickException(f"Playlist '{playlist}' has no tracks")
    else:
        tracks = library.all_tracks()

    logger.info("Loaded %d tracks", len(tracks))
    return tracks
