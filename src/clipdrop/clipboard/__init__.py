from clipdrop.clipboard.base import ClipboardFormat, ClipboardSnapshot
from clipdrop.clipboard.snapshot import StaticClipboardSnapshot
from clipdrop.clipboard.system import SystemClipboardReader

__all__ = [
    "ClipboardFormat",
    "ClipboardSnapshot",
    "StaticClipboardSnapshot",
    "SystemClipboardReader",
]
