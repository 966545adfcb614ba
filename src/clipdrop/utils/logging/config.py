# ABOUTME: Logging setup: loguru owns every sink, stdlib and structlog records are funnelled into it
# ABOUTME: Interactive runs log to files under logs/, production runs emit JSON lines on stdout

import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog
from loguru import logger

LOG_DIR = Path("logs")
QUIETED_LOGGERS = ["httpx", "httpcore", "PIL", "asyncio", "anyio"]

TEXT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
JSON_FORMAT = "{time} | {level} | {name} | {message}"

# File sinks written in interactive mode; None means "use the configured level"
FILE_SINKS: dict[str, dict[str, Any]] = {
    "json": {"path": LOG_DIR / "clipdrop.json", "level": None, "serialize": True, "format": JSON_FORMAT},
    "errors": {"path": LOG_DIR / "errors.log", "level": "ERROR", "backtrace": True, "diagnose": True},
}
DEFAULT_MAIN_LOG = LOG_DIR / "clipdrop.log"


class LoggingMode:
    """Where log output goes."""

    INTERACTIVE = "interactive"
    PRODUCTION = "production"

    ALL = (INTERACTIVE, PRODUCTION)


class InterceptHandler(logging.Handler):
    """Standard library handler that re-emits every record through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru attributes the record to its caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def detect_logging_mode() -> str:
    """CLIPDROP_LOG_MODE wins; otherwise a terminal on stdout means interactive."""
    requested = (os.getenv("CLIPDROP_LOG_MODE") or "").lower()
    if requested in LoggingMode.ALL:
        return requested
    return LoggingMode.INTERACTIVE if sys.stdout.isatty() else LoggingMode.PRODUCTION


def setup_third_party_logging() -> None:
    """Keep chatty libraries at WARNING so clipboard logs stay readable."""
    for name in QUIETED_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    logging.getLogger("py.warnings").setLevel(logging.ERROR)


def setup_structlog() -> None:
    """Send structlog events through the standard library so they reach loguru."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"], drop_missing=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def _add_file_sinks(log_level: str, log_file: str | None) -> None:
    logger.add(
        log_file or str(DEFAULT_MAIN_LOG),
        level=log_level,
        format=TEXT_FORMAT,
        rotation="10 MB",
        retention="7 days",
    )

    for options in FILE_SINKS.values():
        options = dict(options)
        path = options.pop("path")
        options["level"] = options["level"] or log_level
        options.setdefault("format", TEXT_FORMAT)
        if options.get("serialize"):
            options.update(rotation="10 MB", retention="7 days")
        logger.add(path, **options)


def configure_logging(mode: str | None = None, log_level: str = "INFO", log_file: str | None = None) -> None:
    """Install loguru sinks and route stdlib and structlog output into them.

    Args:
        mode: ``LoggingMode`` value; detected from the environment when omitted
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Replaces ``logs/clipdrop.log`` as the human-readable log in interactive mode
    """
    mode = mode or detect_logging_mode()

    setup_third_party_logging()
    setup_structlog()
    logging.basicConfig(
        handlers=[InterceptHandler()],
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True,
    )

    # Start from a clean slate on every call
    logger.remove()

    if mode == LoggingMode.INTERACTIVE:
        try:
            LOG_DIR.mkdir(exist_ok=True)
        except OSError:
            mode = LoggingMode.PRODUCTION

    if mode == LoggingMode.PRODUCTION:
        logger.add(sys.stdout, level=log_level, format=JSON_FORMAT, serialize=True)
    else:
        _add_file_sinks(log_level, log_file)


def get_logging_status() -> dict[str, Any]:
    """Summarize where logs are written, for the ``logging-status`` command."""
    mode = detect_logging_mode()
    files = {"main": DEFAULT_MAIN_LOG, **{name: sink["path"] for name, sink in FILE_SINKS.items()}}

    return {
        "mode": mode,
        "log_directory": str(LOG_DIR.absolute()) if LOG_DIR.exists() else None,
        "log_files": {
            name: str(path) if mode == LoggingMode.INTERACTIVE else None for name, path in files.items()
        },
        "third_party_suppressed": list(QUIETED_LOGGERS),
    }
