"""Media library module."""

from .music_library import LibraryLoadError, MusicLibrary, location_to_path

__all__ = ["LibraryLoadError", "MusicLibrary", "location_to_path"]
