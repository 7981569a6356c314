"""Display formatters for audit results."""

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from rich.console import Console
from rich.table import Table

from ...core.actions import PruneResult
from ...core.reconcile import Finding, FindingKind, ReconciliationReport
from ...models import Track, strip_icloud_root

console = Console()
logger = logging.getLogger(__name__)

KIND_STYLES: Dict[FindingKind, str] = {
    FindingKind.MISSING_FILE: "red",
    FindingKind.LOW_RATING_CANDIDATE: "magenta",
    FindingKind.RATING_MISMATCH: "yellow",
    FindingKind.UNRATED_IN_EXTERNAL_STORE: "cyan",
    FindingKind.NOT_FOUND_IN_EXTERNAL_STORE: "blue",
    FindingKind.TAG_READ_FAILURE: "red",
}


def _sort_key(finding: Finding) -> Tuple[str, str, str]:
    return (finding.kind.value, finding.scope.value, finding.path)


def _rating(value: object) -> str:
    return "" if value is None else str(value)


def display_findings(findings: Iterable[Finding]) -> None:
    """Display findings grouped by kind.

    Args:
        findings: Findings in any order
    """
    ordered = sorted(findings, key=_sort_key)
    if not ordered:
        console.print("[green]✓ No discrepancies found[/green]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Finding", style="cyan")
    table.add_column("Path")
    table.add_column("Music", justify="right")
    table.add_column("Other", justify="right")
    table.add_column("Source")

    for finding in ordered:
        style = KIND_STYLES.get(finding.kind, "white")
        table.add_row(
            f"[{style}]{finding.kind.value}[/{style}]",
            strip_icloud_root(finding.path),
            _rating(finding.local_rating),
            _rating(finding.external_rating),
            finding.detail or finding.scope.value,
        )

    console.print(table)


def display_report_summary(report: ReconciliationReport) -> None:
    """Display statistics of a reconciliation run."""
    console.print("\n[bold green]📊 Audit Summary[/bold green]")

    table = Table(show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")

    summary = report.get_summary()
    table.add_row("Tracks processed", str(summary["tracks_processed"]))
    for kind in FindingKind:
        label = kind.value.replace("_", " ").capitalize()
        table.add_row(label, str(summary[kind.value]))
    if report.ambiguous_matches:
        table.add_row(
            "Ambiguous Rekordbox matches",
            f"[yellow]{report.ambiguous_matches}[/yellow]",
        )
    if report.tags_rewritten:
        table.add_row("Tags rewritten", str(report.tags_rewritten))
    if report.lookup_errors:
        table.add_row("Lookup errors", f"[red]{report.lookup_errors}[/red]")
    if report.track_errors:
        table.add_row("Track errors", f"[red]{report.track_errors}[/red]")

    console.print(table)


def display_library_info(
    version: str, track_count: int, playlists: Sequence[Tuple[str, List[Track]]]
) -> None:
    """Display library version and a line per playlist."""
    console.print(f"Version {version} has {track_count} songs")

    for name, tracks in playlists:
        line = f"{name:>6}: {len(tracks)} songs"
        if tracks:
            first = tracks[0]
            line += f", first {first.relative_path} {first.stars}"
        console.print(line, highlight=False)


def display_prune_result(result: PruneResult) -> None:
    """Display removed (or to-be-removed) files."""
    verb = "Would delete" if result.dry_run else "Deleted"
    for path in result.removed:
        console.print(f"  {verb} {strip_icloud_root(path)}", highlight=False)

    console.print(f"\n[bold]{verb} {result.removed_count} file(s)[/bold]")
    if result.failed:
        console.print(f"[red]{len(result.failed)} file(s) could not be deleted:[/red]")
        for path, error in result.failed:
            console.print(f"  • {path}: {error}")
