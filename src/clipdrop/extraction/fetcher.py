# ABOUTME: Downloads URLs found in clipboard text and images referenced by clipboard HTML
# ABOUTME: Names downloads from response headers and adds a PNG copy when the bytes are an image

import re
from email.message import Message
from pathlib import Path

import anyio
import httpx

from clipdrop.config import Config, get_config
from clipdrop.extraction.images import ImageMaterializer, transcode_to_png
from clipdrop.extraction.models import ExtractionError, FetchError, ImageMaterializationError, ItemResult
from clipdrop.utils.logging import get_logger, with_async_operation_context
from clipdrop.utils.retry import http_retry

SHORTCUT_FILE_NAME = "clipboard.url"
RESPONSE_FILE_NAME = "clipboard.url.response"
IMG_SRC_PATTERN = re.compile(r"<img.*?src=[\"'](.+?)[\"'].*?>", re.IGNORECASE)


def _content_disposition_filename(header: str | None) -> str | None:
    if not header:
        return None
    message = Message()
    message["content-disposition"] = header
    return message.get_filename()


def response_file_name(response: httpx.Response) -> str:
    """Pick a file name for a successful download.

    Priority: Content-Disposition filename, then ``clipboard.<subtype>`` for image
    content types, then ``clipboard.url.response``.
    """
    name = _content_disposition_filename(response.headers.get("content-disposition"))

    if not name or not name.strip():
        media_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if "image" in media_type and "/" in media_type:
            name = "clipboard." + media_type.split("/", 1)[1].lstrip(".")

    name = (name or "").strip("\"' ")
    # Never let a server-supplied name escape the target directory
    name = Path(name).name if name else ""
    return name or RESPONSE_FILE_NAME


class RemoteFetcher:
    """Fetches remote content into the target directory over plain HTTP(S) GETs."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        images: ImageMaterializer | None = None,
        config: Config | None = None,
    ):
        config = config or get_config()
        self.user_agent = config.user_agent
        # Injected clients are used as-is; each request carries the user agent and redirect policy
        self.http_client = client or httpx.AsyncClient(timeout=config.http_timeout)
        self.images = images or ImageMaterializer()
        self._get = http_retry(max_attempts=config.http_max_attempts)(self._request)
        self.logger = get_logger(__name__)

    async def _request(self, url: str) -> httpx.Response:
        return await self.http_client.get(url, headers={"User-Agent": self.user_agent}, follow_redirects=True)

    @with_async_operation_context("fetch_url")
    async def fetch_url(self, target_dir: Path, url_text: str) -> list[ItemResult]:
        """Write an internet shortcut for ``url_text`` and download what it points to.

        Args:
            target_dir: Directory receiving the shortcut and the download
            url_text: One absolute http(s) URL

        Returns:
            Results for the shortcut and the download; failures are logged, not raised
        """
        target_dir = Path(target_dir)
        url_text = url_text.strip()

        try:
            url = httpx.URL(url_text)
        except httpx.InvalidURL as e:
            self.logger.error("Invalid URL", url=url_text, error=str(e))
            return [ItemResult.failed("url", url_text, e)]
        if url.scheme not in ("http", "https") or not url.host:
            self.logger.error("Not an absolute http(s) URL", url=url_text)
            return [ItemResult.failed("url", url_text, "not an absolute http(s) URL")]

        shortcut = target_dir / SHORTCUT_FILE_NAME
        await anyio.Path(shortcut).write_text(f"[InternetShortcut]\nURL={url}", encoding="utf-8")
        results = [ItemResult.ok("shortcut", shortcut)]

        try:
            response = await self._get(str(url))
        except FetchError as e:
            self.logger.error("Error handling URL", url=str(url), error=str(e))
            results.append(ItemResult.failed("url", url, e))
            return results

        if not response.is_success:
            results.append(await self._write_rejection(target_dir, url, response))
            return results

        file_name = response_file_name(response)
        destination = target_dir / file_name
        await anyio.Path(destination).write_bytes(response.content)
        self.logger.info("Downloaded URL", url=str(url), file_name=file_name, size=len(response.content))
        results.append(ItemResult.ok("download", destination))

        if not Path(file_name).suffix.lower().endswith("png"):
            try:
                png = await transcode_to_png(destination, destination.with_suffix(".png"))
                results.append(ItemResult.ok("image", png))
            except ImageMaterializationError as e:
                # Non-image downloads keep only their raw bytes
                self.logger.warning("Error converting download to PNG", file_name=file_name, error=str(e))

        return results

    async def _write_rejection(self, target_dir: Path, url: httpx.URL, response: httpx.Response) -> ItemResult:
        try:
            content: str | None = response.text
        except (UnicodeDecodeError, LookupError, httpx.HTTPError):
            content = None

        body = content if content is not None else f"rejected {response.status_code}"
        await anyio.Path(target_dir / RESPONSE_FILE_NAME).write_bytes(body.encode("utf-8"))
        self.logger.warning("URL rejected", url=str(url), status_code=response.status_code)
        return ItemResult.failed("url", url, f"rejected {response.status_code}")

    async def fetch_html_images(self, target_dir: Path, html: str) -> list[ItemResult]:
        """Download every ``<img src>`` in ``html`` as ``clipboard_image_<n>.png`` plus derived formats.

        Each image is independent: a failed download is logged and the next one is tried.
        """
        if "<img" not in html:
            return []

        target_dir = Path(target_dir)
        results: list[ItemResult] = []
        for index, match in enumerate(IMG_SRC_PATTERN.finditer(html), start=1):
            image_url = match.group(1)
            file_name = f"clipboard_image_{index}.png"
            destination = target_dir / file_name

            try:
                response = await self._get(image_url)
                if not response.is_success:
                    raise FetchError(f"HTTP {response.status_code}")
                await anyio.Path(destination).write_bytes(response.content)
                if await self.images.materialize_file(destination, target_dir, file_name):
                    raise ImageMaterializationError(f"{file_name} is not a readable image")
            except (ExtractionError, OSError) as e:
                self.logger.error("Error downloading image", image_url=image_url, error=str(e))
                results.append(ItemResult.failed("html_image", image_url, e))
                continue

            results.append(ItemResult.ok("html_image", destination))

        return results

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.http_client.aclose()
