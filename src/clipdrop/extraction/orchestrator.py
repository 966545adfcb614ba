# ABOUTME: Top-level clipboard extraction: inspects every representation and writes files for each
# ABOUTME: Branches run in a fixed order, each guarded so one failure never stops the others

import json
from collections.abc import Awaitable, Callable
from pathlib import Path

import anyio

from clipdrop.clipboard.base import ClipboardFormat, ClipboardSnapshot
from clipdrop.config import Config, get_config
from clipdrop.extraction.classifier import ContentClassifier
from clipdrop.extraction.fetcher import RemoteFetcher
from clipdrop.extraction.images import ImageMaterializer
from clipdrop.extraction.models import (
    ContentLabel,
    CopyPolicy,
    ExtractionCancelled,
    ExtractionOutcome,
    ExtractionRequest,
    ItemResult,
)
from clipdrop.extraction.replicator import FileReplicator, count_files
from clipdrop.utils.logging import get_logger, with_extraction_context

TEXT_PRECEDENCE = (ClipboardFormat.UNICODE_TEXT, ClipboardFormat.TEXT, ClipboardFormat.RTF)

Branch = Callable[[ClipboardSnapshot, ExtractionRequest, ExtractionOutcome], Awaitable[None]]


def resolve_text(snapshot: ClipboardSnapshot) -> str | None:
    """First available text in unicode, plain, rich-text order."""
    for fmt in TEXT_PRECEDENCE:
        if snapshot.contains(fmt):
            text = snapshot.get_text(fmt)
            if text is not None:
                return text
    return None


def pretty_json(text: str) -> str | None:
    """Indented form of ``text``, or None when it does not parse."""
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except (ValueError, RecursionError):
        return None


class ClipboardExtractor:
    """Materializes a clipboard snapshot into files under a fresh target directory."""

    def __init__(
        self,
        config: Config | None = None,
        policy: CopyPolicy | None = None,
        classifier: ContentClassifier | None = None,
        images: ImageMaterializer | None = None,
        replicator: FileReplicator | None = None,
        fetcher: RemoteFetcher | None = None,
        confirm_large_drop: Callable[[int], bool] | None = None,
        failure_signal: Callable[[], None] | None = None,
    ):
        self.config = config or get_config()
        self.policy = policy or CopyPolicy.from_config(self.config)
        self.classifier = classifier or ContentClassifier()
        self.images = images or ImageMaterializer()
        self.replicator = replicator or FileReplicator(self.policy, self.images)
        self.fetcher = fetcher or RemoteFetcher(images=self.images, config=self.config)
        self.confirm_large_drop = confirm_large_drop
        self.failure_signal = failure_signal
        self.logger = get_logger(__name__)

    async def extract(self, snapshot: ClipboardSnapshot, request: ExtractionRequest) -> ExtractionOutcome:
        """Write every recognised clipboard representation into ``request.target_directory``.

        Never raises: failures are logged and reported on the returned outcome.
        """
        outcome = ExtractionOutcome(target_directory=request.target_directory)
        branches: list[tuple[str, Callable[[ClipboardSnapshot], bool], Branch]] = [
            ("text", self._has_text, self._extract_text),
            ("file_drop", lambda s: s.contains(ClipboardFormat.FILE_DROP), self._extract_file_drop),
            ("csv", lambda s: s.contains(ClipboardFormat.CSV), self._extract_csv),
            ("html", lambda s: s.contains(ClipboardFormat.HTML), self._extract_html),
            ("wave_audio", lambda s: s.contains(ClipboardFormat.WAVE_AUDIO), self._extract_audio),
            ("image", lambda s: s.contains(ClipboardFormat.BITMAP), self._extract_image),
        ]

        with with_extraction_context(request.target_directory) as logger:
            for name, present, run in branches:
                try:
                    if not present(snapshot):
                        continue
                    outcome.branches.append(name)
                    await run(snapshot, request, outcome)
                except ExtractionCancelled:
                    logger.warning("Extraction cancelled", branch=name)
                    outcome.cancelled = True
                    break
                except Exception as e:
                    logger.error(f"Error in {name} extraction", error=str(e), error_type=type(e).__name__)
                    outcome.errors.append(f"{name}: {e}")
                    self._signal_failure(outcome)

            outcome.any_content = bool(outcome.branches)
            if not outcome.any_content:
                logger.warning("Unsupported clipboard format")
            else:
                logger.info(
                    "Clipboard extracted",
                    branches=outcome.branches,
                    label=outcome.label.value if outcome.label else None,
                    items=len(outcome.items),
                    failed_items=len(outcome.failed_items),
                )

        return outcome

    def _has_text(self, snapshot: ClipboardSnapshot) -> bool:
        text = resolve_text(snapshot)
        return text is not None and bool(text.strip())

    async def _extract_text(
        self, snapshot: ClipboardSnapshot, request: ExtractionRequest, outcome: ExtractionOutcome
    ) -> None:
        text = resolve_text(snapshot) or ""
        label = self.classifier.classify(text)
        outcome.label = label

        await self._write_text(request, outcome, f"clipboard.{label.value}", text)
        if label != ContentLabel.TXT:
            await self._write_text(request, outcome, "clipboard.txt", text)

        if label == ContentLabel.JSON:
            formatted = pretty_json(text)
            if formatted is None:
                self.logger.debug("Clipboard JSON did not parse, skipping formatted copy")
            elif formatted != text:
                await self._write_text(request, outcome, "clipboard.formatted.json", formatted)

        if label == ContentLabel.URL:
            for line in text.replace("\r", "").split("\n"):
                if line.strip():
                    outcome.items.extend(await self.fetcher.fetch_url(request.target_directory, line))

        if snapshot.contains(ClipboardFormat.RTF):
            rtf = snapshot.get_text(ClipboardFormat.RTF)
            if rtf is not None:
                await self._write_text(request, outcome, "clipboard.rtf", rtf)

    async def _extract_file_drop(
        self, snapshot: ClipboardSnapshot, request: ExtractionRequest, outcome: ExtractionOutcome
    ) -> None:
        sources = snapshot.get_file_drop_list()
        total = await anyio.to_thread.run_sync(count_files, sources)

        threshold = self.config.file_count_confirmation_threshold
        if total > threshold and not self._confirm(total):
            self.logger.warning("Large file drop declined", file_count=total, threshold=threshold)
            return

        for source in sources:
            outcome.items.extend(await self.replicator.replicate(Path(source), request.target_directory))

    async def _extract_csv(
        self, snapshot: ClipboardSnapshot, request: ExtractionRequest, outcome: ExtractionOutcome
    ) -> None:
        data = snapshot.get_text(ClipboardFormat.CSV) or ""
        await self._write(outcome, request.target_directory / "clipboard.csv", data.encode("utf-8"))

    async def _extract_html(
        self, snapshot: ClipboardSnapshot, request: ExtractionRequest, outcome: ExtractionOutcome
    ) -> None:
        html = snapshot.get_text(ClipboardFormat.HTML) or ""
        await self._write(outcome, request.target_directory / "clipboard.html", html.encode("utf-8"))
        outcome.items.extend(await self.fetcher.fetch_html_images(request.target_directory, html))

    async def _extract_audio(
        self, snapshot: ClipboardSnapshot, request: ExtractionRequest, outcome: ExtractionOutcome
    ) -> None:
        await self._write(outcome, request.target_directory / "clipboard.wav", snapshot.get_audio() or b"")

    async def _extract_image(
        self, snapshot: ClipboardSnapshot, request: ExtractionRequest, outcome: ExtractionOutcome
    ) -> None:
        target = request.target_directory / "clipboard"
        failed = await self.images.materialize(snapshot.get_image(), request.target_directory, snapshot=snapshot)
        if failed:
            outcome.items.append(ItemResult.failed("image", target, "image not saved"))
            self._signal_failure(outcome)
        else:
            outcome.items.append(ItemResult.ok("image", target))

    async def _write_text(
        self, request: ExtractionRequest, outcome: ExtractionOutcome, file_name: str, text: str
    ) -> None:
        request.raise_if_cancelled()
        path = request.target_directory / file_name
        await anyio.Path(path).write_bytes(text.encode("utf-8"))
        outcome.items.append(ItemResult.ok("text", path))

    async def _write(self, outcome: ExtractionOutcome, path: Path, data: bytes) -> None:
        await anyio.Path(path).write_bytes(data)
        outcome.items.append(ItemResult.ok("file", path))

    def _confirm(self, file_count: int) -> bool:
        if self.confirm_large_drop is None:
            return False
        return bool(self.confirm_large_drop(file_count))

    def _signal_failure(self, outcome: ExtractionOutcome) -> None:
        outcome.failure_signaled = True
        if self.failure_signal is not None:
            self.failure_signal()

    async def close(self) -> None:
        """Release the HTTP client."""
        await self.fetcher.close()

    async def __aenter__(self) -> "ClipboardExtractor":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
