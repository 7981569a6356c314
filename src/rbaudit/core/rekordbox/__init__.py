"""Rekordbox integration module.

Read-only lookups against the Rekordbox content database.
"""

from .content_store import ContentStoreUnavailableError, RekordboxContentStore

__all__ = [
    "ContentStoreUnavailableError",
    "RekordboxContentStore",
]
