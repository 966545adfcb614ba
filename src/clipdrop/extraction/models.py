# ABOUTME: Data models shared by the clipboard extraction pipeline
# ABOUTME: Content labels, copy policy, per-call request, per-item results, and the overall outcome

from enum import Enum
from pathlib import Path

import anyio
from pydantic import BaseModel, ConfigDict, Field

from clipdrop.config import Config

# Both 0 and this value switch hard-linking off
UNBOUNDED_HARD_LINK_SIZE = 2**31 - 1


class ExtractionError(Exception):
    """Base exception for clipboard extraction failures."""

    pass


class FetchError(ExtractionError):
    """Raised when a remote resource cannot be downloaded."""

    pass


class FetchTimeoutError(FetchError):
    """Raised when a download times out."""

    pass


class FetchConnectionError(FetchError):
    """Raised when the remote host cannot be reached."""

    pass


class ImageMaterializationError(ExtractionError):
    """Raised when an image cannot be decoded or converted."""

    pass


class ExtractionCancelled(ExtractionError):
    """Raised when the host cancels an extraction between writes."""

    pass


class ContentLabel(str, Enum):
    """Semantic kind of a text clipboard payload, used as the file extension."""

    CS = "cs"
    JSON = "json"
    JAVA = "java"
    PY = "py"
    HTML = "html"
    CSS = "css"
    JS = "js"
    XML = "xml"
    SQL = "sql"
    URL = "url"
    TXT = "txt"


class CopyPolicy(BaseModel):
    """Decides whether a dropped file is hard-linked or byte-copied."""

    model_config = ConfigDict(frozen=True)

    max_hard_link_size: int = Field(default=0, ge=0)

    @property
    def hard_link_enabled(self) -> bool:
        return self.max_hard_link_size not in (0, UNBOUNDED_HARD_LINK_SIZE)

    def should_hard_link(self, size: int) -> bool:
        return self.hard_link_enabled and size > self.max_hard_link_size

    @classmethod
    def from_config(cls, config: Config) -> "CopyPolicy":
        return cls(max_hard_link_size=config.max_hard_link_size)


class ExtractionRequest(BaseModel):
    """One clipboard event: where to write, and how the host can cancel."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    target_directory: Path
    cancellation: anyio.Event | None = None

    @property
    def cancelled(self) -> bool:
        return self.cancellation is not None and self.cancellation.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise ExtractionCancelled(f"Extraction into {self.target_directory} was cancelled")


class ItemResult(BaseModel):
    """Result of a single file, image, or network operation."""

    kind: str
    target: str
    success: bool = True
    error: str | None = None

    @classmethod
    def ok(cls, kind: str, target: Path | str) -> "ItemResult":
        return cls(kind=kind, target=str(target))

    @classmethod
    def failed(cls, kind: str, target: Path | str, error: BaseException | str) -> "ItemResult":
        return cls(kind=kind, target=str(target), success=False, error=str(error))


class ExtractionOutcome(BaseModel):
    """Aggregate result of one extraction call."""

    target_directory: Path
    any_content: bool = False
    branches: list[str] = Field(default_factory=list)
    label: ContentLabel | None = None
    items: list[ItemResult] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    failure_signaled: bool = False
    cancelled: bool = False

    @property
    def failed_items(self) -> list[ItemResult]:
        return [item for item in self.items if not item.success]

    @property
    def succeeded(self) -> bool:
        """True when something was extracted and nothing went wrong."""
        return self.any_content and not self.errors and not self.failed_items and not self.cancelled
