# ABOUTME: Clipboard representation formats and the read-only snapshot protocol
# ABOUTME: The pipeline only sees clipboards through this interface, never the platform directly

from enum import Enum
from pathlib import Path
from typing import Protocol

from PIL import Image


class ClipboardFormat(str, Enum):
    """Alternate encodings a single clipboard payload can offer at once."""

    UNICODE_TEXT = "unicode_text"
    TEXT = "text"
    RTF = "rtf"
    FILE_DROP = "file_drop"
    HTML = "html"
    CSV = "csv"
    WAVE_AUDIO = "wave_audio"
    BITMAP = "bitmap"


TEXT_FORMATS = (
    ClipboardFormat.UNICODE_TEXT,
    ClipboardFormat.TEXT,
    ClipboardFormat.RTF,
    ClipboardFormat.HTML,
    ClipboardFormat.CSV,
)


class ClipboardSnapshot(Protocol):
    """Read-only view of the representations present on a clipboard."""

    def contains(self, fmt: ClipboardFormat) -> bool:
        """Whether the clipboard offers the given representation."""
        ...

    def get_text(self, fmt: ClipboardFormat) -> str | None:
        """Text for one of the textual formats (unicode, plain, rtf, html, csv)."""
        ...

    def get_file_drop_list(self) -> list[Path]:
        """Paths of files and directories copied in a file manager."""
        ...

    def get_audio(self) -> bytes | None:
        """Raw wave audio bytes."""
        ...

    def get_image(self) -> Image.Image | None:
        """Bitmap with its source format tag (``Image.format``) intact."""
        ...
