# ABOUTME: Shared pytest fixtures for the clipdrop test suite
# ABOUTME: Isolated config, a fresh target directory, and small encoded images

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from clipdrop.config import Config


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config rooted in the test's temp directory with a single HTTP attempt."""
    return Config(
        directory_root=tmp_path / "root",
        state_file=tmp_path / "state" / "directories.json",
        http_max_attempts=1,
    )


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    path = tmp_path / "target"
    path.mkdir()
    return path


def encode_image(fmt: str, size: tuple[int, int] = (4, 4), color: str = "red") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return encode_image("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return encode_image("JPEG")
