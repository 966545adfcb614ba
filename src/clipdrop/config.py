# ABOUTME: clipdrop settings, read from CLIPDROP_* environment variables and an optional .env file
# ABOUTME: Provides type-safe access to copy policy, HTTP, directory, and logging settings

import tempfile
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.3"
)


class Config(BaseSettings):
    """Settings for copying, downloading, directory tracking and logging."""

    model_config = SettingsConfigDict(
        env_prefix="CLIPDROP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # File drop handling
    max_hard_link_size: int = Field(
        default=0,
        ge=0,
        description="Files larger than this many bytes are hard-linked instead of copied (0 disables linking)",
    )
    file_count_confirmation_threshold: int = Field(
        default=1000, ge=0, description="Ask before copying file drops with more files than this"
    )

    # HTTP Configuration
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header sent with every download")
    http_timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")
    http_max_attempts: int = Field(default=3, ge=1, description="Attempts per GET before giving up on transport errors")

    # Working directory tracking
    directory_root: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Parent directory for freshly minted working directories",
    )
    state_file: Path = Field(
        default_factory=lambda: Path.home() / ".clipdrop" / "directories.json",
        description="JSON file listing the working directories that are still alive",
    )

    # Logging Configuration
    log_mode: Literal["interactive", "production"] = Field(default="interactive", description="Where logs are written")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Minimum level that reaches the log sinks"
    )

    log_file: Path | None = Field(default=None, description="Replaces logs/clipdrop.log as the main log file")


# Process-wide instance, built on first use
_config_instance: Config | None = None


def get_config() -> Config:
    """Return the process-wide Config, building it on first call."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def reload_config() -> Config:
    """Rebuild the process-wide Config from the current environment."""
    global _config_instance
    _config_instance = Config()
    return _config_instance
