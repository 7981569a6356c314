"""Configuration management for the rating audit."""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load .env file from config directory or working directory
config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if config_env.exists():
    load_dotenv(config_env)
else:
    load_dotenv()

DEFAULT_PLAYLISTS = "eatmos,ebup,edrive,epeak,ebang,ebdown"


class ConfigError(ValueError):
    """Raised when a configuration value is invalid."""

    pass


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Music library export
        self.library_xml = Path(
            os.getenv(
                "RBAUDIT_LIBRARY_XML",
                str(Path.home() / "Music" / "Music" / "Library.xml"),
            )
        ).expanduser()

        # Rekordbox database, pyrekordbox locates it when unset
        rekordbox_db = os.getenv("RBAUDIT_REKORDBOX_DB")
        self.rekordbox_db: Optional[Path] = (
            Path(rekordbox_db).expanduser() if rekordbox_db else None
        )
        self.rekordbox_key: Optional[str] = os.getenv("RBAUDIT_REKORDBOX_KEY") or None

        # Worker pool, also the number of pooled database connections
        workers = os.getenv("RBAUDIT_WORKERS", "8")
        try:
            self.workers = int(workers)
        except ValueError as e:
            raise ConfigError(f"RBAUDIT_WORKERS must be an integer: {workers}") from e
        if self.workers < 1:
            raise ConfigError(f"RBAUDIT_WORKERS must be positive: {self.workers}")

        # Tag settings
        self.tag_rating_source = os.getenv("RBAUDIT_TAG_RATING_SOURCE", "itunes")
        self.check_tags = _get_bool("RBAUDIT_CHECK_TAGS", False)

        # Playlists summarized by the info command
        self.playlists: List[str] = [
            name.strip()
            for name in os.getenv("RBAUDIT_PLAYLISTS", DEFAULT_PLAYLISTS).split(",")
            if name.strip()
        ]


def get_config() -> Config:
    """Get application configuration."""
    return Config()
