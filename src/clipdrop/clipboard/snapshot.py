# ABOUTME: In-memory clipboard snapshot built from explicit values
# ABOUTME: Used by tests and by the CLI to feed files on disk through the pipeline

from io import BytesIO
from pathlib import Path

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field

from clipdrop.clipboard.base import TEXT_FORMATS, ClipboardFormat


class StaticClipboardSnapshot(BaseModel):
    """Clipboard contents captured once and held in memory."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    unicode_text: str | None = None
    text: str | None = None
    rtf: str | None = None
    html: str | None = None
    csv: str | None = None
    file_drop: list[Path] = Field(default_factory=list)
    wave_audio: bytes | None = None
    image: Image.Image | None = None

    def contains(self, fmt: ClipboardFormat) -> bool:
        if fmt == ClipboardFormat.FILE_DROP:
            return bool(self.file_drop)
        if fmt == ClipboardFormat.WAVE_AUDIO:
            return self.wave_audio is not None
        if fmt == ClipboardFormat.BITMAP:
            return self.image is not None
        return self.get_text(fmt) is not None

    def get_text(self, fmt: ClipboardFormat) -> str | None:
        if fmt not in TEXT_FORMATS:
            raise ValueError(f"{fmt.value} is not a text format")
        return getattr(self, fmt.value)

    def get_file_drop_list(self) -> list[Path]:
        return list(self.file_drop)

    def get_audio(self) -> bytes | None:
        return self.wave_audio

    def get_image(self) -> Image.Image | None:
        return self.image

    @staticmethod
    def load_image(data: bytes) -> Image.Image:
        """Decode encoded image bytes, keeping the format tag the pipeline keys on."""
        image = Image.open(BytesIO(data))
        image.load()
        return image
