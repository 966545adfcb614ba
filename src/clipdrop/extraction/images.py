# ABOUTME: Writes clipboard and dropped images in their native format plus a PNG copy
# ABOUTME: Also hosts the PNG transcode used for webp drops and downloaded content

from collections.abc import Callable
from pathlib import Path

import anyio
from PIL import Image

from clipdrop.clipboard.base import ClipboardFormat, ClipboardSnapshot
from clipdrop.extraction.models import ImageMaterializationError
from clipdrop.utils.logging import get_logger

DEFAULT_BASE_NAME = "clipboard"

# Pillow format tag -> extension written for the native copy
NATIVE_EXTENSIONS: dict[str, str] = {
    "JPEG": "jpg",
    "PNG": "png",
    "GIF": "gif",
    "BMP": "bmp",
    "EMF": "emf",
    "WMF": "wmf",
    "EXIF": "exif",
    "TIFF": "tiff",
    "DIB": "bmp",
    "ICO": "ico",
}
FALLBACK_EXTENSION = "bmp"

# Pillow save format for each written extension
SAVE_FORMATS: dict[str, str] = {
    "jpg": "JPEG",
    "png": "PNG",
    "gif": "GIF",
    "bmp": "BMP",
    "emf": "WMF",
    "wmf": "WMF",
    "exif": "JPEG",
    "tiff": "TIFF",
    "ico": "ICO",
}

SAVEABLE_MODES: dict[str, set[str]] = {
    "PNG": {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"},
    "BMP": {"1", "L", "P", "RGB", "RGBA"},
    "JPEG": {"1", "L", "RGB", "CMYK"},
}


def image_path(target_dir: Path, base_name: str, extension: str) -> Path:
    """``target_dir/base_name`` with its extension replaced; an absolute base name ignores target_dir.

    A base name already carrying ``extension`` in any letter case keeps its own spelling.
    """
    base = Path(base_name)
    if base.suffix.lower() == f".{extension}":
        return Path(target_dir) / base
    return Path(target_dir) / base.with_suffix(f".{extension}")


def _convert_for(image: Image.Image, save_format: str) -> Image.Image:
    modes = SAVEABLE_MODES.get(save_format)
    if modes is None or image.mode in modes:
        return image
    has_alpha = "A" in image.getbands() and "RGBA" in modes
    return image.convert("RGBA" if has_alpha else "RGB")


def _open_image(path: Path) -> Image.Image:
    with Image.open(path) as image:
        image.load()
        return image


def _transcode_to_png(source: Path, destination: Path) -> None:
    with Image.open(source) as image:
        _convert_for(image, "PNG").save(destination, "PNG")


async def transcode_to_png(source: Path, destination: Path) -> Path:
    """Decode ``source`` with Pillow and write it to ``destination`` as PNG.

    Raises:
        ImageMaterializationError: If the source is not a decodable image or cannot be written
    """
    try:
        await anyio.to_thread.run_sync(_transcode_to_png, source, destination)
    except (OSError, ValueError) as e:
        raise ImageMaterializationError(f"Cannot convert {source.name} to PNG: {e}") from e
    return destination


class ImageMaterializer:
    """Saves an image under a base name in its native format and as PNG, never overwriting."""

    def __init__(self, failure_signal: Callable[[], None] | None = None):
        self.failure_signal = failure_signal
        self.logger = get_logger(__name__)

    async def materialize(
        self,
        image: Image.Image | None,
        target_dir: Path,
        base_name: str | None = None,
        snapshot: ClipboardSnapshot | None = None,
    ) -> bool:
        """Write ``image`` as ``base_name.<native ext>`` and ``base_name.png``.

        Falls back to the snapshot's bitmap when no image is given. Files that already
        exist are left untouched, so repeated calls for one base name are no-ops.

        Args:
            image: Decoded image carrying its source format tag
            target_dir: Directory receiving the files
            base_name: File name whose extension gets replaced, defaults to "clipboard"
            snapshot: Clipboard to pull a bitmap from when ``image`` is None

        Returns:
            True if the call failed, False if every needed file is present
        """
        if image is None and snapshot is not None and snapshot.contains(ClipboardFormat.BITMAP):
            image = snapshot.get_image()

        if image is None or image.format is None:
            self.logger.error("Failed to get image from clipboard", target_dir=str(target_dir))
            self._signal_failure()
            return True

        base_name = base_name or DEFAULT_BASE_NAME
        try:
            written = await anyio.to_thread.run_sync(self._save_formats, image, Path(target_dir), base_name)
        except Exception as e:
            # Pillow reports codec problems with a mix of OSError, KeyError and ValueError
            self.logger.error(
                "Error saving image",
                base_name=base_name,
                image_format=image.format,
                error=str(e),
                error_type=type(e).__name__,
            )
            return True

        self.logger.info("Materialized image", base_name=base_name, image_format=image.format, written=written)
        return False

    async def materialize_file(self, source: Path, target_dir: Path, base_name: str | None = None) -> bool:
        """Open an image file and materialize it; returns True on failure."""
        try:
            image = await anyio.to_thread.run_sync(_open_image, source)
        except (OSError, ValueError) as e:
            self.logger.error("Cannot open image file", source=str(source), error=str(e))
            return True

        with image:
            return await self.materialize(image, target_dir, base_name or source.name)

    def _save_formats(self, image: Image.Image, target_dir: Path, base_name: str) -> list[str]:
        native_format = image.format or ""
        native_extension = NATIVE_EXTENSIONS.get(native_format, FALLBACK_EXTENSION)

        written = []
        if self._save_if_missing(image, image_path(target_dir, base_name, native_extension), native_extension):
            written.append(native_extension)
        if native_format != "PNG" and self._save_if_missing(image, image_path(target_dir, base_name, "png"), "png"):
            written.append("png")
        return written

    @staticmethod
    def _save_if_missing(image: Image.Image, path: Path, extension: str) -> bool:
        if path.exists():
            return False
        save_format = SAVE_FORMATS[extension]
        _convert_for(image, save_format).save(path, save_format)
        return True

    def _signal_failure(self) -> None:
        if self.failure_signal is not None:
            self.failure_signal()
