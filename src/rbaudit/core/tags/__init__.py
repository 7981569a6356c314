"""Embedded tag access."""

from .tag_service import (
    TagReadError,
    TagService,
    TagSet,
    popm_to_stars,
    stars_to_popm,
    year_week,
)

__all__ = [
    "TagReadError",
    "TagService",
    "TagSet",
    "popm_to_stars",
    "stars_to_popm",
    "year_week",
]
