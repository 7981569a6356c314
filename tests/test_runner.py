"""Tests for the batch reconciliation runner."""

import os
import threading
from collections import Counter
from unittest.mock import Mock

import pytest
from mutagen.id3 import ID3, POPM

from rbaudit.core.reconcile import (
    FindingKind,
    FindingScope,
    ReconciliationReport,
    ReconciliationRunner,
    file_exists,
)
from rbaudit.core.rekordbox import ContentStoreUnavailableError
from rbaudit.core.tags import TagReadError, TagService
from rbaudit.models import ExternalRecord, Track

ROOT = "/Users/bas/Library/Mobile Documents/com~apple~CloudDocs/Music"


def track(name, rating, external_id=None):
    """Create a track whose filename optionally carries an id."""
    if external_id is None:
        return Track(path=f"{ROOT}/{name}.mp3", rating=rating)
    return Track(path=f"{ROOT}/{name} -- Artist [{external_id}].mp3", rating=rating)


class FakeContentStore:
    """In-memory stand-in for RekordboxContentStore."""

    pool_size = 4

    def __init__(self, ratings=None, failing=()):
        self.ratings = ratings or {}
        self.failing = set(failing)
        self.lookups = []
        self._lock = threading.Lock()

    def find(self, external_id):
        with self._lock:
            self.lookups.append(external_id)
        if external_id in self.failing:
            raise ContentStoreUnavailableError("database is locked")
        if external_id not in self.ratings:
            return None
        return ExternalRecord(
            id=f"c{external_id}",
            filename=f"x [{external_id}].mp3",
            rating=self.ratings[external_id],
        )


@pytest.fixture
def tracks():
    """One track per branch of the policy."""
    return {
        "same": track("Same", 3, "1"),
        "unrated": track("Unrated", 4, "2"),
        "mismatch": track("Mismatch", 2, "3"),
        "missing": track("Missing", 5, "4"),
        "one_star": track("One Star", 1, "5"),
        "not_found": track("Not Found", 3, "6"),
        "no_id": track("No Id", 4),
        "unknown": track("Unknown", 3, "7"),
    }


@pytest.fixture
def store():
    """Store knowing ids 1-5 and 7."""
    return FakeContentStore({"1": 3, "2": 0, "3": 5, "4": 5, "5": 4, "7": 1})


@pytest.fixture
def exists(tracks):
    """Existence predicate: one missing, one unknown."""
    states = {t.path: True for t in tracks.values()}
    states[tracks["missing"].path] = False
    states[tracks["unknown"].path] = None
    return lambda path: states[path]


class TestFileExists:
    """Test the tri-state existence check."""

    def test_existing(self, tmp_path):
        """Test an existing file."""
        path = tmp_path / "a.mp3"
        path.write_bytes(b"")
        assert file_exists(str(path)) is True

    def test_missing(self, tmp_path):
        """Test a missing file."""
        assert file_exists(str(tmp_path / "missing.mp3")) is False

    def test_unknown(self):
        """Test an unusable path gives no answer."""
        assert file_exists("bad\0path") is None

    @pytest.mark.skipif(
        os.name == "nt" or os.geteuid() == 0, reason="needs POSIX permissions"
    )
    def test_permission_denied(self, tmp_path):
        """Test a permission error is unknown rather than missing."""
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "a.mp3").write_bytes(b"")
        locked.chmod(0)
        try:
            assert file_exists(str(locked / "a.mp3")) is None
        finally:
            locked.chmod(0o755)


class TestReconciliationRunner:
    """Test ReconciliationRunner."""

    def test_run_covers_every_branch(self, tracks, store, exists):
        """Test each track yields the finding its state calls for."""
        runner = ReconciliationRunner(store, exists_check=exists)

        report = runner.run(list(tracks.values()))

        by_path = {f.path: f.kind for f in report.findings}
        assert by_path == {
            tracks["unrated"].path: FindingKind.UNRATED_IN_EXTERNAL_STORE,
            tracks["mismatch"].path: FindingKind.RATING_MISMATCH,
            tracks["missing"].path: FindingKind.MISSING_FILE,
            tracks["one_star"].path: FindingKind.LOW_RATING_CANDIDATE,
            tracks["not_found"].path: FindingKind.NOT_FOUND_IN_EXTERNAL_STORE,
        }
        assert len(report.findings) == 5
        assert report.tracks_processed == 8
        assert report.lookup_errors == 0

    def test_lookups_are_skipped_when_not_needed(self, tracks, store, exists):
        """Test missing, unknown and one-star tracks are not looked up."""
        ReconciliationRunner(store, exists_check=exists).run(list(tracks.values()))

        assert sorted(store.lookups) == ["1", "2", "3", "6"]

    def test_mismatch_values(self, tracks, store, exists):
        """Test the mismatch carries both ratings."""
        report = ReconciliationRunner(store, exists_check=exists).run(
            [tracks["mismatch"]]
        )

        (finding,) = report.findings
        assert finding.local_rating == 2
        assert finding.external_rating == 5
        assert finding.external_id == "3"

    def test_idempotent(self, tracks, store, exists):
        """Test repeated runs give the same multiset of findings."""
        runner = ReconciliationRunner(store, max_workers=8, exists_check=exists)

        first = runner.run(list(tracks.values()))
        second = runner.run(list(reversed(list(tracks.values()))))

        assert Counter(first.findings) == Counter(second.findings)

    def test_lookup_failure_is_contained(self, tracks, exists):
        """Test a failing lookup is counted, not reported as not found."""
        store = FakeContentStore({"1": 3, "2": 0}, failing={"3", "6"})
        runner = ReconciliationRunner(store, exists_check=exists)

        report = runner.run(list(tracks.values()))

        assert report.lookup_errors == 2
        kinds = Counter(f.kind for f in report.findings)
        assert kinds[FindingKind.NOT_FOUND_IN_EXTERNAL_STORE] == 0
        assert kinds[FindingKind.RATING_MISMATCH] == 0
        assert kinds[FindingKind.UNRATED_IN_EXTERNAL_STORE] == 1
        assert kinds[FindingKind.MISSING_FILE] == 1

    def test_unexpected_error_is_contained(self, tracks, store):
        """Test one crashing track does not stop the batch."""
        boom = tracks["same"].path

        def exists_check(path):
            if path == boom:
                raise RuntimeError("unexpected")
            return True

        report = ReconciliationRunner(store, exists_check=exists_check).run(
            [tracks["same"], tracks["mismatch"]]
        )

        assert report.track_errors == 1
        assert report.tracks_processed == 1
        assert [f.kind for f in report.findings] == [FindingKind.RATING_MISMATCH]

    def test_ambiguous_matches_counted(self):
        """Test records matching several rows are counted."""
        store = Mock(pool_size=2)
        store.find.return_value = ExternalRecord(
            id="1", filename="a [9].mp3", rating=3, match_count=2
        )

        report = ReconciliationRunner(store, exists_check=lambda p: True).run(
            [track("A", 3, "9")]
        )

        assert report.ambiguous_matches == 1
        assert report.findings == []

    def test_empty_batch(self, store):
        """Test an empty track list."""
        report = ReconciliationRunner(store).run([])

        assert report.findings == []
        assert report.tracks_processed == 0

    def test_track_without_path(self, store):
        """Test tracks without a path produce nothing."""
        outcome = ReconciliationRunner(store).process_track(Track(path=None, rating=3))

        assert outcome.findings == []
        assert store.lookups == []

    def test_max_workers_defaults_to_pool_size(self, store):
        """Test the worker count follows the connection pool."""
        assert ReconciliationRunner(store).max_workers == 4
        assert ReconciliationRunner(store, max_workers=2).max_workers == 2

    def test_progress_reported(self, tracks, store, exists):
        """Test the callback receives a completed update."""
        callback = Mock()
        ReconciliationRunner(
            store, exists_check=exists, progress_callback=callback
        ).run(list(tracks.values()))

        last = callback.call_args_list[-1][0][0]
        assert last.is_complete
        assert last.total == 8


class TestTagPass:
    """Test the optional tag comparison."""

    @pytest.fixture
    def tag_service(self):
        """Tag service reporting a two-star itunes rating."""
        service = Mock()
        service.rating_source = "itunes"
        service.read.return_value = Mock(name="tag_set")
        service.read_rating.return_value = 2
        return service

    def test_tag_mismatch(self, tag_service, store):
        """Test tag ratings are compared with the library rating."""
        runner = ReconciliationRunner(
            store, tag_service=tag_service, exists_check=lambda p: True
        )

        report = runner.run([track("Same", 3, "1")])

        (finding,) = report.findings
        assert finding.kind == FindingKind.RATING_MISMATCH
        assert finding.scope == FindingScope.TAGS
        assert finding.external_rating == 2
        tag_service.stamp_rating.assert_not_called()

    def test_tag_check_without_id(self, tag_service, store):
        """Test tags are checked for tracks without catalogue id."""
        runner = ReconciliationRunner(
            store, tag_service=tag_service, exists_check=lambda p: True
        )

        report = runner.run([track("No Id", 4)])

        assert [f.scope for f in report.findings] == [FindingScope.TAGS]

    def test_fix_tags(self, tag_service, store):
        """Test mismatching tags are rewritten when asked."""
        runner = ReconciliationRunner(
            store, tag_service=tag_service, exists_check=lambda p: True, fix_tags=True
        )

        report = runner.run([track("Same", 3, "1")])

        tag_service.stamp_rating.assert_called_once_with(
            tag_service.read.return_value, 3
        )
        assert report.tags_rewritten == 1

    def test_tag_read_failure(self, tag_service, store):
        """Test unreadable tags become a finding and keep other findings."""
        tag_service.read.side_effect = TagReadError("Cannot read ID3")
        runner = ReconciliationRunner(
            store, tag_service=tag_service, exists_check=lambda p: True
        )

        report = runner.run([track("Mismatch", 2, "3")])

        kinds = sorted(f.kind.value for f in report.findings)
        assert kinds == ["rating_mismatch", "tag_read_failure"]

    def test_tag_write_failure(self, tag_service, store):
        """Test a failed rewrite is reported as a tag failure."""
        tag_service.stamp_rating.side_effect = TagReadError("read-only")
        runner = ReconciliationRunner(
            store, tag_service=tag_service, exists_check=lambda p: True, fix_tags=True
        )

        report = runner.run([track("Same", 3, "1")])

        kinds = sorted(f.kind.value for f in report.findings)
        assert kinds == ["rating_mismatch", "tag_read_failure"]
        assert report.tags_rewritten == 0

    @pytest.mark.parametrize("exists", [False, None])
    def test_tags_skipped_for_absent_files(self, tag_service, store, exists):
        """Test tags are not read when the file is missing or unknown."""
        runner = ReconciliationRunner(
            store, tag_service=tag_service, exists_check=lambda p: exists
        )

        runner.run([track("Same", 3, "1")])

        tag_service.read.assert_not_called()

    def test_tags_skipped_for_one_star(self, tag_service, store):
        """Test one-star files are only flagged."""
        runner = ReconciliationRunner(
            store, tag_service=tag_service, exists_check=lambda p: True
        )

        report = runner.run([track("One", 1, "1")])

        tag_service.read.assert_not_called()
        assert [f.kind for f in report.findings] == [
            FindingKind.LOW_RATING_CANDIDATE
        ]


    def test_unrated_track_keeps_tags(self, tag_service, store):
        """Test unrated library tracks never rewrite tag ratings."""
        tag_service.read_rating.return_value = 4
        runner = ReconciliationRunner(
            store, tag_service=tag_service, exists_check=lambda p: True, fix_tags=True
        )

        report = runner.run([track("Unrated", 0)])

        assert report.findings == []
        assert report.tags_rewritten == 0
        tag_service.stamp_rating.assert_not_called()

    def test_unrated_track_with_real_tags(self, store, tmp_path):
        """Test a rated ID3 file survives a fixing run for an unrated track."""
        path = tmp_path / "Song -- Artist.mp3"
        path.write_bytes(b"")
        tags = ID3()
        tags.add(POPM(email="itunes", rating=196, count=0))
        tags.save(str(path))
        runner = ReconciliationRunner(
            store, tag_service=TagService("itunes"), fix_tags=True
        )

        report = runner.run([Track(path=str(path), rating=0)])

        assert report.findings == []
        assert [frame.rating for frame in ID3(str(path)).getall("POPM")] == [196]


class TestReconciliationReport:
    """Test ReconciliationReport."""

    def test_summary_lists_every_kind(self):
        """Test kinds without findings are reported as zero."""
        summary = ReconciliationReport().get_summary()

        for kind in FindingKind:
            assert summary[kind.value] == 0
        assert summary["total_findings"] == 0

    def test_by_kind(self, tracks, store, exists):
        """Test filtering findings by kind."""
        report = ReconciliationRunner(store, exists_check=exists).run(
            list(tracks.values())
        )

        missing = report.by_kind(FindingKind.MISSING_FILE)
        assert [f.path for f in missing] == [tracks["missing"].path]
        assert report.counts()[FindingKind.MISSING_FILE] == 1
