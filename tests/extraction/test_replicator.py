# ABOUTME: Tests for recursive file drop replication
# ABOUTME: Hard-link threshold, tree completeness, failure isolation, and image side effects

import os
from pathlib import Path
from unittest.mock import patch

import anyio
import pytest
from PIL import Image

from clipdrop.extraction import replicator as replicator_module
from clipdrop.extraction.models import UNBOUNDED_HARD_LINK_SIZE, CopyPolicy
from clipdrop.extraction.replicator import FileReplicator, count_files


def make_tree(root: Path) -> Path:
    source = root / "project"
    (source / "src" / "pkg").mkdir(parents=True)
    (source / "empty").mkdir()
    (source / "README.md").write_text("readme")
    (source / "src" / "main.txt").write_text("main")
    (source / "src" / "pkg" / "deep.txt").write_text("deep")
    return source


class TestCopyPolicy:
    @pytest.mark.parametrize("limit", [0, UNBOUNDED_HARD_LINK_SIZE])
    def test_sentinel_limits_disable_linking(self, limit):
        policy = CopyPolicy(max_hard_link_size=limit)
        assert policy.hard_link_enabled is False
        assert policy.should_hard_link(10**12) is False

    def test_only_strictly_larger_files_are_linked(self):
        policy = CopyPolicy(max_hard_link_size=10)
        assert policy.should_hard_link(10) is False
        assert policy.should_hard_link(11) is True


class TestCountFiles:
    def test_counts_files_recursively(self, tmp_path):
        source = make_tree(tmp_path)
        loose = tmp_path / "loose.txt"
        loose.write_text("x")

        assert count_files([source, loose]) == 4

    def test_missing_paths_count_zero(self, tmp_path):
        assert count_files([tmp_path / "nope"]) == 0


class TestFileReplicator:
    """Test copying dropped files and directories."""

    @pytest.mark.asyncio
    async def test_replicates_tree_completely(self, tmp_path, target_dir):
        source = make_tree(tmp_path)

        results = await FileReplicator(CopyPolicy()).replicate(source, target_dir)

        copied = target_dir / "project"
        assert (copied / "README.md").read_text() == "readme"
        assert (copied / "src" / "main.txt").read_text() == "main"
        assert (copied / "src" / "pkg" / "deep.txt").read_text() == "deep"
        assert (copied / "empty").is_dir()
        assert len(results) == 3
        assert all(result.success for result in results)

    @pytest.mark.asyncio
    async def test_hard_link_threshold(self, tmp_path, target_dir):
        """A file of exactly N bytes is copied, N + 1 bytes is linked."""
        small = tmp_path / "small.bin"
        small.write_bytes(b"x" * 10)
        large = tmp_path / "large.bin"
        large.write_bytes(b"x" * 11)
        replicator = FileReplicator(CopyPolicy(max_hard_link_size=10))

        small_results = await replicator.replicate(small, target_dir)
        large_results = await replicator.replicate(large, target_dir)

        assert small_results[0].kind == "copy"
        assert large_results[0].kind == "hard_link"
        assert os.stat(target_dir / "small.bin").st_ino != os.stat(small).st_ino
        assert os.stat(target_dir / "large.bin").st_ino == os.stat(large).st_ino

    @pytest.mark.asyncio
    async def test_linking_disabled_copies_everything(self, tmp_path, target_dir):
        source = tmp_path / "big.bin"
        source.write_bytes(b"x" * 4096)

        results = await FileReplicator(CopyPolicy(max_hard_link_size=0)).replicate(source, target_dir)

        assert results[0].kind == "copy"
        assert os.stat(target_dir / "big.bin").st_ino != os.stat(source).st_ino

    @pytest.mark.asyncio
    async def test_failed_file_does_not_stop_siblings(self, tmp_path, target_dir):
        source = make_tree(tmp_path)
        real_copy = replicator_module._stream_copy

        def flaky_copy(src, dst):
            if Path(src).name == "main.txt":
                raise PermissionError("locked")
            real_copy(src, dst)

        with patch("clipdrop.extraction.replicator._stream_copy", side_effect=flaky_copy):
            results = await FileReplicator(CopyPolicy()).replicate(source, target_dir)

        failed = [result for result in results if not result.success]
        assert len(failed) == 1
        assert failed[0].target.endswith("main.txt")
        assert "locked" in failed[0].error
        assert (target_dir / "project" / "README.md").exists()
        assert (target_dir / "project" / "src" / "pkg" / "deep.txt").exists()

    @pytest.mark.asyncio
    async def test_locked_file_in_ten_file_drop(self, tmp_path, target_dir):
        sources = []
        for index in range(10):
            source = tmp_path / f"file{index}.txt"
            source.write_text(str(index))
            sources.append(source)
        real_copy = replicator_module._stream_copy

        def flaky_copy(src, dst):
            if Path(src).name == "file4.txt":
                raise PermissionError("locked")
            real_copy(src, dst)

        replicator = FileReplicator(CopyPolicy())
        with patch("clipdrop.extraction.replicator._stream_copy", side_effect=flaky_copy):
            for source in sources:
                await replicator.replicate(source, target_dir)

        copied = sorted(path.name for path in target_dir.iterdir() if path.stat().st_size)
        assert len(copied) == 9
        assert "file4.txt" not in copied

    @pytest.mark.asyncio
    async def test_missing_source_is_reported(self, tmp_path, target_dir):
        results = await FileReplicator(CopyPolicy()).replicate(tmp_path / "gone.txt", target_dir)

        assert len(results) == 1
        assert results[0].success is False
        assert results[0].error == "source not found"

    @pytest.mark.asyncio
    async def test_symlinked_directory_is_skipped(self, tmp_path, target_dir):
        real = make_tree(tmp_path)
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)

        results = await FileReplicator(CopyPolicy()).replicate(link, target_dir)

        assert results[0].success is False
        assert not (target_dir / "link").exists()

    @pytest.mark.asyncio
    async def test_existing_target_directory_is_merged(self, tmp_path, target_dir):
        source = make_tree(tmp_path)
        (target_dir / "project").mkdir()
        (target_dir / "project" / "keep.txt").write_text("keep")

        await FileReplicator(CopyPolicy()).replicate(source, target_dir)

        assert (target_dir / "project" / "keep.txt").exists()
        assert (target_dir / "project" / "README.md").exists()

    @pytest.mark.asyncio
    async def test_dropped_jpeg_gets_png_copy(self, tmp_path, target_dir, jpeg_bytes):
        source = tmp_path / "photo.jpg"
        source.write_bytes(jpeg_bytes)

        results = await FileReplicator(CopyPolicy()).replicate(source, target_dir)

        assert [result.kind for result in results] == ["copy", "image"]
        assert (target_dir / "photo.jpg").exists()
        assert (target_dir / "photo.png").exists()

    @pytest.mark.asyncio
    async def test_dropped_webp_is_transcoded(self, tmp_path, target_dir):
        source = tmp_path / "sticker.webp"
        Image.new("RGB", (3, 3), "green").save(source, "WEBP")

        results = await FileReplicator(CopyPolicy()).replicate(source, target_dir)

        assert (target_dir / "sticker.webp").exists()
        assert (target_dir / "sticker.png").exists()
        assert all(result.success for result in results)

    @pytest.mark.asyncio
    async def test_corrupt_image_is_reported(self, tmp_path, target_dir):
        source = tmp_path / "broken.png"
        source.write_text("not really a png")

        results = await FileReplicator(CopyPolicy()).replicate(source, target_dir)

        assert results[0].success is True
        assert results[1].kind == "image"
        assert results[1].success is False

    @pytest.mark.asyncio
    async def test_directory_clashing_with_copied_file_does_not_stop_drop(self, tmp_path, target_dir):
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "data").write_text("file")
        (tmp_path / "b" / "data").mkdir(parents=True)
        (tmp_path / "b" / "data" / "inner.txt").write_text("inner")
        (tmp_path / "other.txt").write_text("other")
        replicator = FileReplicator(CopyPolicy())

        results = []
        for source in [tmp_path / "a" / "data", tmp_path / "b" / "data", tmp_path / "other.txt"]:
            results.extend(await replicator.replicate(source, target_dir))

        assert (target_dir / "data").read_text() == "file"
        assert (target_dir / "other.txt").read_text() == "other"
        assert [result.kind for result in results if not result.success] == ["directory"]

    @pytest.mark.asyncio
    async def test_unreadable_directory_is_reported(self, tmp_path, target_dir):
        source = make_tree(tmp_path)

        with patch.object(anyio.Path, "iterdir", side_effect=PermissionError("denied")):
            results = await FileReplicator(CopyPolicy()).replicate(source, target_dir)

        assert len(results) == 1
        assert results[0].kind == "directory"
        assert "denied" in results[0].error

    @pytest.mark.asyncio
    async def test_uppercase_image_extension_is_not_duplicated(self, tmp_path, target_dir, jpeg_bytes):
        source = tmp_path / "photo.JPG"
        source.write_bytes(jpeg_bytes)

        await FileReplicator(CopyPolicy()).replicate(source, target_dir)

        assert sorted(path.name for path in target_dir.iterdir()) == ["photo.JPG", "photo.png"]
