"""CLI command modules."""

from .check import check_command
from .info import info_command
from .prune import prune_command

__all__ = [
    "check_command",
    "info_command",
    "prune_command",
]
