"""Models for the rating audit."""

from .models import (
    ICLOUD_ROOT,
    ExternalRecord,
    LibraryItem,
    Track,
    build_tracks,
    scale_rating,
    strip_icloud_root,
)

__all__ = [
    "ICLOUD_ROOT",
    "ExternalRecord",
    "LibraryItem",
    "Track",
    "build_tracks",
    "scale_rating",
    "strip_icloud_root",
]
