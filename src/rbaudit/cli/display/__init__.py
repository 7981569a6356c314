"""CLI display and formatting utilities."""

from .formatters import (
    display_findings,
    display_library_info,
    display_prune_result,
    display_report_summary,
)

__all__ = [
    "display_findings",
    "display_library_info",
    "display_prune_result",
    "display_report_summary",
]
