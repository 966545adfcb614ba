# ABOUTME: Tests for working directory tracking and the JSON state file
# ABOUTME: Creation, persistence across instances, pruning, deletion, and flush

import json

import pytest

from clipdrop.persistence import DirectoryTracker


@pytest.fixture
def tracker(config) -> DirectoryTracker:
    return DirectoryTracker(config=config)


class TestDirectoryTracker:
    """Test the working directory lifecycle."""

    def test_create_directory(self, tracker, config):
        path = tracker.create_directory()

        assert path.is_dir()
        assert path.parent == config.directory_root
        assert len(path.name) == 8
        assert list(path.iterdir()) == []
        assert tracker.list_directories() == [path]

    def test_directories_are_unique(self, tracker):
        assert tracker.create_directory() != tracker.create_directory()
        assert len(tracker.list_directories()) == 2

    def test_state_survives_new_instance(self, tracker, config):
        path = tracker.create_directory()

        assert DirectoryTracker(config=config).list_directories() == [path]

    def test_state_file_format(self, tracker, config):
        path = tracker.create_directory()

        assert json.loads(config.state_file.read_text()) == [{"directory": str(path)}]

    def test_duplicates_are_collapsed(self, tracker, tmp_path):
        tracker.add(tmp_path / "a")
        tracker.add(tmp_path / "a/")

        assert tracker.list_directories() == [tmp_path / "a"]

    def test_corrupt_state_file_reads_as_empty(self, tracker, config):
        config.state_file.parent.mkdir(parents=True)
        config.state_file.write_text("{ not a list")

        assert tracker.list_directories() == []

    def test_prune_forgets_missing_directories(self, tracker, tmp_path):
        alive = tracker.create_directory()
        tracker.add(tmp_path / "vanished")

        assert tracker.prune() == [alive]
        assert tracker.list_directories() == [alive]

    def test_delete_directory(self, tracker):
        path = tracker.create_directory()
        (path / "clipboard.txt").write_text("x")

        assert tracker.delete_directory(path) is True
        assert not path.exists()
        assert tracker.list_directories() == []

    def test_delete_missing_directory_counts_as_deleted(self, tracker, tmp_path):
        tracker.add(tmp_path / "already-gone")

        assert tracker.delete_directory(tmp_path / "already-gone") is True
        assert tracker.list_directories() == []

    def test_flush_deletes_everything(self, tracker):
        paths = [tracker.create_directory() for _ in range(3)]

        assert tracker.flush() == []
        assert not any(path.exists() for path in paths)
        assert tracker.list_directories() == []

    def test_flush_keeps_undeletable_directories(self, tracker, monkeypatch):
        keep = tracker.create_directory()
        drop = tracker.create_directory()

        def fake_rmtree(path):
            if path == keep:
                raise PermissionError("in use")
            path.rmdir()

        monkeypatch.setattr("clipdrop.persistence.tracker.shutil.rmtree", fake_rmtree)

        assert tracker.flush() == [keep]
        assert keep.exists()
        assert not drop.exists()
        assert tracker.list_directories() == [keep]
