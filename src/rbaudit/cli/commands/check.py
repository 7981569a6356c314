"""CLI command reconciling library ratings with Rekordbox and tags."""

import logging
import sys
from typing import Optional, Tuple

import click

from ...config import Config
from ...core.progress_tracker import TqdmProgressReporter
from ...core.reconcile import FindingKind, ReconciliationRunner
from ...core.rekordbox import ContentStoreUnavailableError, RekordboxContentStore
from ...core.tags import TagService
from ..display import display_findings, display_report_summary
from .common import load_tracks, open_library

logger = logging.getLogger(__name__)


@click.command("check")
@click.option("--playlist", "-p", type=str, help="Check only a single playlist")
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    help="Parallel workers and Rekordbox connections (defaults to RBAUDIT_WORKERS)",
)
@click.option(
    "--check-tags/--no-check-tags",
    default=None,
    help="Compare embedded ID3 ratings too (defaults to RBAUDIT_CHECK_TAGS)",
)
@click.option(
    "--fix-tags",
    is_flag=True,
    help="Rewrite mismatching ID3 ratings to the library rating",
)
@click.option(
    "--kind",
    "-k",
    "kinds",
    multiple=True,
    type=click.Choice([kind.value for kind in FindingKind]),
    help="Only show findings of this kind (repeatable)",
)
@click.option("--no-progress", is_flag=True, help="Hide the progress bar")
@click.pass_obj
def check_command(
    config: Config,
    playlist: Optional[str],
    workers: Optional[int],
    check_tags: Optional[bool],
    fix_tags: bool,
    kinds: Tuple[str, ...],
    no_progress: bool,
) -> None:
    """Report rating discrepancies between Music, Rekordbox and ID3 tags."""
    if fix_tags and check_tags is False:
        raise click.UsageError("--fix-tags cannot be combined with --no-check-tags")

    library = open_library(config)
    tracks = load_tracks(library, playlist)

    pool_size = workers or config.workers
    if check_tags is None:
        check_tags = config.check_tags or fix_tags
    tag_service = TagService(config.tag_rating_source) if check_tags else None

    reporter = TqdmProgressReporter(disable=no_progress or not sys.stderr.isatty())
    store = RekordboxContentStore(
        db_path=config.rekordbox_db,
        key=config.rekordbox_key,
        pool_size=pool_size,
    )

    try:
        with store:
            runner = ReconciliationRunner(
                store,
                tag_service=tag_service,
                max_workers=pool_size,
                fix_tags=fix_tags,
                progress_callback=reporter,
            )
            report = runner.run(tracks)
    except ContentStoreUnavailableError as e:
        raise click.ClickException(str(e)) from e
    finally:
        reporter.close()

    findings = report.findings
    if kinds:
        findings = [f for f in findings if f.kind.value in kinds]

    display_findings(findings)
    display_report_summary(report)

    if report.lookup_errors:
        raise click.ClickException(
            f"{report.lookup_errors} Rekordbox lookups failed, results are incomplete"
        )
