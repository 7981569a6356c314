"""Filename identity parsing."""

from .parser import (
    FILENAME_PATTERN,
    FilenameCaptures,
    extract_external_id,
    parse_filename,
)

__all__ = [
    "FILENAME_PATTERN",
    "FilenameCaptures",
    "extract_external_id",
    "parse_filename",
]
