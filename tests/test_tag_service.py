"""Tests for ID3 rating tags."""

from datetime import date
from pathlib import Path

import pytest
from mutagen.id3 import ID3, POPM, TIT1

from rbaudit.core.tags import (
    TagReadError,
    TagService,
    popm_to_stars,
    stars_to_popm,
    year_week,
)


@pytest.fixture
def tagged_file(tmp_path: Path) -> Path:
    """Create a file carrying POPM frames from two sources."""
    path = tmp_path / "Song -- Artist [123].mp3"
    path.write_bytes(b"")
    tags = ID3()
    tags.add(POPM(email="itunes", rating=128, count=3))
    tags.add(POPM(email="Windows Media Player 9 Series", rating=255, count=0))
    tags.add(TIT1(encoding=3, text=["2401"]))
    tags.save(str(path))
    return path


@pytest.fixture
def untagged_file(tmp_path: Path) -> Path:
    """Create a file without an ID3 header."""
    path = tmp_path / "untagged.mp3"
    path.write_bytes(b"")
    return path


class TestRatingConversion:
    """Test POPM byte conversion."""

    @pytest.mark.parametrize("stars", [0, 1, 2, 3, 4, 5])
    def test_stars_survive_conversion(self, stars):
        """Test each star rating maps to a byte inside its own band."""
        assert popm_to_stars(stars_to_popm(stars)) == stars

    @pytest.mark.parametrize(
        "value,stars",
        [(0, 0), (1, 1), (31, 1), (32, 2), (100, 3), (200, 4), (224, 5)],
    )
    def test_bands(self, value, stars):
        """Test bytes written by other taggers."""
        assert popm_to_stars(value) == stars

    def test_invalid_stars(self):
        """Test out of range ratings are rejected."""
        with pytest.raises(ValueError):
            stars_to_popm(6)


class TestYearWeek:
    """Test the provenance week stamp."""

    def test_week_50(self):
        """Test a mid-December date."""
        assert year_week(date(2025, 12, 10)) == "2550"

    def test_iso_year_differs_from_calendar_year(self):
        """Test the ISO week-numbering year is used."""
        assert year_week(date(2024, 12, 30)) == "2501"
        assert year_week(date(2021, 1, 1)) == "2053"

    def test_zero_padded(self):
        """Test single digit weeks are padded."""
        assert year_week(date(2025, 2, 5)) == "2506"

    def test_defaults_to_today(self):
        """Test the stamp is four digits."""
        stamp = year_week()
        assert len(stamp) == 4
        assert stamp.isdigit()


class TestTagService:
    """Test TagService."""

    def test_read_rating(self, tagged_file):
        """Test the configured source's rating is read."""
        service = TagService("itunes")
        tag_set = service.read(tagged_file)

        assert tag_set.popularity("itunes") == ("itunes", 3)
        assert service.read_rating(tag_set) == 3
        assert tag_set.grouping == "2401"
        assert set(tag_set.rating_sources()) == {
            "itunes",
            "Windows Media Player 9 Series",
        }

    def test_other_source(self, tagged_file):
        """Test sources are kept apart."""
        service = TagService("Windows Media Player 9 Series")
        assert service.read_rating(service.read(tagged_file)) == 5

    def test_unrated_source(self, tagged_file):
        """Test a source that never rated yields None."""
        service = TagService("MusicBee")
        assert service.read_rating(service.read(tagged_file)) is None

    def test_untagged_file(self, untagged_file):
        """Test files without ID3 header read as empty."""
        service = TagService()
        tag_set = service.read(untagged_file)

        assert service.read_rating(tag_set) is None
        assert tag_set.grouping is None

    def test_read_missing_file(self, tmp_path):
        """Test unreadable files raise TagReadError."""
        with pytest.raises(TagReadError):
            TagService().read(tmp_path / "missing.mp3")

    def test_stamp_rating(self, tagged_file):
        """Test rewriting a rating and grouping."""
        service = TagService("itunes")
        tag_set = service.read(tagged_file)

        service.stamp_rating(tag_set, 5, grouping="2550")

        reread = service.read(tagged_file)
        assert service.read_rating(reread) == 5
        assert reread.grouping == "2550"
        # Other sources are left alone
        assert reread.popularity("Windows Media Player 9 Series") == (
            "Windows Media Player 9 Series",
            5,
        )
        assert len(reread.tags.getall("POPM:itunes")) == 1
        assert reread.tags.getall("POPM:itunes")[0].count == 3

    def test_stamp_rating_untagged(self, untagged_file):
        """Test tags are created for files without ID3 header."""
        service = TagService("itunes")
        service.stamp_rating(service.read(untagged_file), 2)

        reread = service.read(untagged_file)
        assert service.read_rating(reread) == 2
        assert reread.grouping == year_week()

    def test_write_failure(self, tagged_file, tmp_path):
        """Test write failures raise TagReadError."""
        service = TagService()
        tag_set = service.read(tagged_file)
        tag_set.path = tmp_path  # a directory cannot be written as a file

        with pytest.raises(TagReadError):
            service.write(tag_set)
