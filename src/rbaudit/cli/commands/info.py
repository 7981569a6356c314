"""CLI command summarizing the music library."""

import click

from ...config import Config
from ..display import display_library_info
from .common import open_library


@click.command("info")
@click.option(
    "--playlist",
    "-p",
    "playlists",
    multiple=True,
    help="Playlist to summarize (repeatable, defaults to RBAUDIT_PLAYLISTS)",
)
@click.pass_obj
def info_command(config: Config, playlists: tuple) -> None:
    """Show library version, track count and playlist heads."""
    library = open_library(config)
    names = list(playlists) or config.playlists

    display_library_info(
        library.version(),
        len(library.all_tracks()),
        [(name, library.playlist_tracks(name)) for name in names],
    )
