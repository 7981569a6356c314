"""Core business logic for the rating audit.

This package is organized by source:
- filename: Catalogue id parsing from track filenames
- library: Media library export reading
- rekordbox: Rekordbox content lookups
- tags: ID3 rating and grouping tags
- reconcile: Reconciliation policy and batch runner
"""

__all__: list[str] = []
