# ABOUTME: Recursively copies dropped files and directories into the target directory
# ABOUTME: Large files become hard links; copied images get their extra formats written

import shutil
from collections.abc import Iterable
from pathlib import Path

import anyio

from clipdrop.extraction.images import ImageMaterializer, transcode_to_png
from clipdrop.extraction.models import CopyPolicy, ImageMaterializationError, ItemResult
from clipdrop.utils.logging import get_logger

IMAGE_EXTENSIONS = frozenset(
    {"jpg", "jpeg", "png", "gif", "bmp", "tiff", "ico", "emf", "wmf", "exif", "memorybmp"}
)
# Formats converted to PNG first, then handled as a regular image
TRANSCODE_EXTENSIONS = frozenset({"webp"})

COPY_CHUNK_SIZE = 1024 * 1024


def _stream_copy(source: Path, destination: Path) -> None:
    # Read-only open; the source stays usable by other processes during the copy
    with open(source, "rb") as src, open(destination, "wb") as dst:
        shutil.copyfileobj(src, dst, COPY_CHUNK_SIZE)


def count_files(paths: Iterable[Path]) -> int:
    """Number of files under ``paths``: a file counts once, directories are expanded recursively."""
    count = 0
    for path in paths:
        if path.is_file():
            count += 1
        elif path.is_dir():
            count += sum(1 for entry in path.rglob("*") if entry.is_file())
    return count


class FileReplicator:
    """Copies a file or directory tree into a target directory, one file at a time."""

    def __init__(self, policy: CopyPolicy, images: ImageMaterializer | None = None):
        self.policy = policy
        self.images = images or ImageMaterializer()
        self.logger = get_logger(__name__)

    async def replicate(self, source: Path, target_dir: Path) -> list[ItemResult]:
        """Replicate ``source`` under ``target_dir``, depth first.

        Args:
            source: File or directory to copy
            target_dir: Existing directory that receives the copy

        Returns:
            One result per file operation; failures are logged and never raised
        """
        path = anyio.Path(source)

        if await path.is_file():
            return await self.copy_file(Path(source), target_dir)

        if await path.is_dir():
            if await path.is_symlink():
                self.logger.warning("Skipping symlinked directory", source=str(source))
                return [ItemResult.failed("directory", source, "symlinked directory skipped")]

            new_target = Path(target_dir) / Path(source).name
            try:
                await anyio.Path(new_target).mkdir(exist_ok=True)
                entries = [Path(entry) async for entry in path.iterdir()]
            except OSError as e:
                self.logger.error("Error copying directory", source=str(source), target=str(new_target), error=str(e))
                return [ItemResult.failed("directory", new_target, e)]

            results: list[ItemResult] = []
            for entry in entries:
                results.extend(await self.replicate(entry, new_target))
            return results

        self.logger.warning("Dropped path no longer exists", source=str(source))
        return [ItemResult.failed("file", source, "source not found")]

    async def copy_file(self, source: Path, target_dir: Path) -> list[ItemResult]:
        """Hard-link or copy one file, then hand image files to the materializer."""
        destination = Path(target_dir) / source.name
        results: list[ItemResult] = []

        try:
            size = (await anyio.Path(source).stat()).st_size
            if self.policy.should_hard_link(size):
                await anyio.Path(destination).hardlink_to(source)
                self.logger.info("Hard link created", destination=str(destination), size=size)
                results.append(ItemResult.ok("hard_link", destination))
            else:
                await anyio.to_thread.run_sync(_stream_copy, source, destination)
                results.append(ItemResult.ok("copy", destination))
        except OSError as e:
            self.logger.error("Error copying file", source=str(source), destination=str(destination), error=str(e))
            results.append(ItemResult.failed("copy", destination, e))
            return results

        image_result = await self._handle_image_file(Path(target_dir), destination)
        if image_result is not None:
            results.append(image_result)
        return results

    async def _handle_image_file(self, target_dir: Path, target_file: Path) -> ItemResult | None:
        extension = target_file.suffix.lstrip(".").lower()

        try:
            if extension in TRANSCODE_EXTENSIONS:
                target_file = await transcode_to_png(target_file, target_dir / target_file.with_suffix(".png").name)
                extension = "png"
        except ImageMaterializationError as e:
            self.logger.error("Error handling image file", target_file=str(target_file), error=str(e))
            return ItemResult.failed("image", target_file, e)

        if extension not in IMAGE_EXTENSIONS:
            return None

        failed = await self.images.materialize_file(target_file, target_dir, target_file.name)
        if failed:
            return ItemResult.failed("image", target_file, "image could not be materialized")
        return ItemResult.ok("image", target_file)
