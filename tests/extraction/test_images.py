# ABOUTME: Tests for image materialization and PNG transcoding
# ABOUTME: Covers native plus PNG output, idempotence, snapshot fallback, and failure reporting

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image

from clipdrop.clipboard import StaticClipboardSnapshot
from clipdrop.extraction.images import ImageMaterializer, image_path, transcode_to_png
from clipdrop.extraction.models import ImageMaterializationError


class TestImagePath:
    def test_extension_is_replaced(self, tmp_path):
        assert image_path(tmp_path, "photo.jpeg", "png") == tmp_path / "photo.png"

    def test_bare_base_name_gets_extension(self, tmp_path):
        assert image_path(tmp_path, "clipboard", "bmp") == tmp_path / "clipboard.bmp"

    def test_matching_extension_keeps_its_case(self, tmp_path):
        assert image_path(tmp_path, "photo.JPG", "jpg") == tmp_path / "photo.JPG"
        assert image_path(tmp_path, "photo.JPG", "png") == tmp_path / "photo.png"


class TestImageMaterializer:
    """Test writing images in their native format plus PNG."""

    @pytest.mark.asyncio
    async def test_jpeg_writes_native_and_png(self, target_dir, jpeg_bytes):
        image = StaticClipboardSnapshot.load_image(jpeg_bytes)

        failed = await ImageMaterializer().materialize(image, target_dir)

        assert failed is False
        assert (target_dir / "clipboard.jpg").exists()
        assert (target_dir / "clipboard.png").exists()
        with Image.open(target_dir / "clipboard.png") as saved:
            assert saved.format == "PNG"

    @pytest.mark.asyncio
    async def test_png_writes_single_file(self, target_dir, png_bytes):
        image = StaticClipboardSnapshot.load_image(png_bytes)

        failed = await ImageMaterializer().materialize(image, target_dir, "shot.png")

        assert failed is False
        assert sorted(p.name for p in target_dir.iterdir()) == ["shot.png"]

    @pytest.mark.asyncio
    async def test_existing_files_are_not_overwritten(self, target_dir, jpeg_bytes):
        """A second call for the same base name leaves the first output untouched."""
        image = StaticClipboardSnapshot.load_image(jpeg_bytes)
        materializer = ImageMaterializer()

        assert await materializer.materialize(image, target_dir) is False
        png = target_dir / "clipboard.png"
        first = png.read_bytes()
        png.write_bytes(b"sentinel")

        assert await materializer.materialize(image, target_dir) is False
        assert png.read_bytes() == b"sentinel"
        assert first != b"sentinel"

    @pytest.mark.asyncio
    async def test_falls_back_to_snapshot_bitmap(self, target_dir, png_bytes):
        snapshot = StaticClipboardSnapshot(image=StaticClipboardSnapshot.load_image(png_bytes))

        failed = await ImageMaterializer().materialize(None, target_dir, snapshot=snapshot)

        assert failed is False
        assert (target_dir / "clipboard.png").exists()

    @pytest.mark.asyncio
    async def test_missing_image_fails_and_signals(self, target_dir):
        signal = MagicMock()

        failed = await ImageMaterializer(failure_signal=signal).materialize(None, target_dir)

        assert failed is True
        signal.assert_called_once()
        assert list(target_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_image_without_format_tag_fails(self, target_dir):
        """Images created in memory have no source format and cannot be named."""
        failed = await ImageMaterializer().materialize(Image.new("RGB", (2, 2)), target_dir)
        assert failed is True

    @pytest.mark.asyncio
    async def test_save_error_is_reported_not_raised(self, target_dir, jpeg_bytes):
        image = StaticClipboardSnapshot.load_image(jpeg_bytes)

        failed = await ImageMaterializer().materialize(image, target_dir / "missing-dir")

        assert failed is True

    @pytest.mark.asyncio
    async def test_materialize_file_uses_source_name(self, target_dir, tmp_path, jpeg_bytes):
        source = tmp_path / "holiday.jpg"
        source.write_bytes(jpeg_bytes)

        failed = await ImageMaterializer().materialize_file(source, target_dir)

        assert failed is False
        assert (target_dir / "holiday.jpg").exists()
        assert (target_dir / "holiday.png").exists()

    @pytest.mark.asyncio
    async def test_materialize_file_rejects_non_images(self, target_dir, tmp_path):
        source = tmp_path / "notes.png"
        source.write_text("not an image")

        assert await ImageMaterializer().materialize_file(source, target_dir) is True


class TestTranscodeToPng:
    @pytest.mark.asyncio
    async def test_transcodes_webp(self, tmp_path):
        source = tmp_path / "pic.webp"
        Image.new("RGB", (3, 3), "blue").save(source, "WEBP")

        result = await transcode_to_png(source, tmp_path / "pic.png")

        assert result == tmp_path / "pic.png"
        with Image.open(result) as image:
            assert image.format == "PNG"

    @pytest.mark.asyncio
    async def test_non_image_raises(self, tmp_path):
        source = tmp_path / "page.html"
        source.write_text("<html></html>")

        with pytest.raises(ImageMaterializationError):
            await transcode_to_png(source, Path(tmp_path / "page.png"))
