"""CLI command removing one-star files."""

import logging
from typing import List, Optional

import click

from ...config import Config
from ...core.actions import remove_low_rated
from ...core.reconcile import Finding, FindingKind, file_exists, reconcile
from ..display import display_prune_result
from .common import load_tracks, open_library

logger = logging.getLogger(__name__)


@click.command("prune")
@click.option("--playlist", "-p", type=str, help="Only consider a single playlist")
@click.option("--apply", is_flag=True, help="Actually delete the files")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def prune_command(
    config: Config, playlist: Optional[str], apply: bool, yes: bool
) -> None:
    """Delete files rated one star (dry run unless --apply).

    The library and Rekordbox entries are left untouched.
    """
    library = open_library(config)
    tracks = load_tracks(library, playlist)

    candidates: List[Finding] = []
    for track in tracks:
        if track.path is None or track.rating != 1:
            continue
        candidates.extend(
            finding
            for finding in reconcile(
                track.path, file_exists(track.path), track.rating, None, None
            )
            if finding.kind == FindingKind.LOW_RATING_CANDIDATE
        )

    if not candidates:
        click.echo("No one-star files found")
        return

    if apply and not yes:
        click.confirm(f"Delete {len(candidates)} one-star file(s)?", abort=True)

    result = remove_low_rated(candidates, dry_run=not apply)
    display_prune_result(result)

    if result.failed:
        raise click.ClickException("One or more files could not be deleted")
