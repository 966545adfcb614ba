# ABOUTME: Reads the live desktop clipboard through wl-paste (Wayland) or xclip (X11)
# ABOUTME: Every offered MIME target is mapped onto a ClipboardFormat and captured once

import os
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path
from urllib.parse import unquote, urlparse

from PIL import UnidentifiedImageError

from clipdrop.clipboard.base import ClipboardFormat
from clipdrop.clipboard.snapshot import StaticClipboardSnapshot
from clipdrop.utils.logging import get_logger

Reader = Callable[[str], bytes | None]

# Checked in order; the first offered target wins for each format.
TARGETS: dict[ClipboardFormat, tuple[str, ...]] = {
    ClipboardFormat.UNICODE_TEXT: ("text/plain;charset=utf-8", "utf8_string"),
    ClipboardFormat.TEXT: ("text/plain", "string", "text"),
    ClipboardFormat.RTF: ("text/rtf", "text/richtext", "application/rtf"),
    ClipboardFormat.HTML: ("text/html",),
    ClipboardFormat.CSV: ("text/csv", "text/comma-separated-values"),
    ClipboardFormat.FILE_DROP: ("x-special/gnome-copied-files", "text/uri-list"),
    ClipboardFormat.WAVE_AUDIO: ("audio/wav", "audio/x-wav", "audio/wave"),
    ClipboardFormat.BITMAP: (
        "image/png",
        "image/jpeg",
        "image/gif",
        "image/bmp",
        "image/x-ms-bmp",
        "image/tiff",
        "image/webp",
    ),
}

COMMAND_TIMEOUT = 1.5


class SystemClipboardReader:
    """Capture the desktop clipboard into a StaticClipboardSnapshot."""

    def __init__(self, timeout: float = COMMAND_TIMEOUT):
        self.timeout = timeout
        self.logger = get_logger(__name__)

    def capture(self) -> StaticClipboardSnapshot:
        """Read every supported representation; an unreadable clipboard yields an empty snapshot."""
        backend = self._select_backend()
        if backend is None:
            self.logger.warning("No clipboard tool available (install wl-clipboard or xclip)")
            return StaticClipboardSnapshot()

        list_command, reader = backend
        offered = self._parse_type_list(self._run_command(list_command))
        self.logger.debug("Clipboard targets", targets=offered)
        return self._build_snapshot(offered, reader)

    def _select_backend(self) -> tuple[list[str], Reader] | None:
        if os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-paste"):
            return ["wl-paste", "--list-types"], lambda target: self._run_command(
                ["wl-paste", "--no-newline", "--type", target]
            )
        if shutil.which("xclip"):
            return ["xclip", "-selection", "clipboard", "-t", "TARGETS", "-o"], lambda target: self._run_command(
                ["xclip", "-selection", "clipboard", "-t", target, "-o"]
            )
        return None

    def _build_snapshot(self, offered: list[str], reader: Reader) -> StaticClipboardSnapshot:
        lowered = {target.lower(): target for target in offered}
        values: dict[str, object] = {}

        for fmt, candidates in TARGETS.items():
            target = next((lowered[c] for c in candidates if c in lowered), None)
            if target is None:
                continue
            data = reader(target)
            if not data:
                continue

            if fmt == ClipboardFormat.FILE_DROP:
                values["file_drop"] = self._parse_paths(data)
            elif fmt == ClipboardFormat.WAVE_AUDIO:
                values["wave_audio"] = data
            elif fmt == ClipboardFormat.BITMAP:
                try:
                    values["image"] = StaticClipboardSnapshot.load_image(data)
                except (UnidentifiedImageError, OSError) as e:
                    self.logger.warning("Clipboard image could not be decoded", target=target, error=str(e))
            else:
                values[fmt.value] = data.decode("utf-8", errors="replace")

        return StaticClipboardSnapshot(**values)

    @staticmethod
    def _parse_type_list(data: bytes | None) -> list[str]:
        if not data:
            return []
        text = data.decode("utf-8", errors="ignore")
        return [line.strip() for line in text.splitlines() if line.strip()]

    @staticmethod
    def _parse_paths(data: bytes) -> list[Path]:
        text = data.decode("utf-8", errors="ignore")
        lines = [line.strip() for line in text.replace("\r", "\n").split("\n") if line.strip()]
        # gnome-copied-files prefixes the list with the clipboard action
        if lines and lines[0].lower() in {"copy", "cut"}:
            lines = lines[1:]

        paths: list[Path] = []
        for entry in lines:
            if entry.startswith("#"):
                continue
            parsed = urlparse(entry)
            paths.append(Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(unquote(entry)))
        return paths

    def _run_command(self, command: list[str]) -> bytes | None:
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=self.timeout,
            )
            return result.stdout
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError):
            return None
