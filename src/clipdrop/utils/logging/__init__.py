# ABOUTME: Logging configuration and structured logger helpers
# ABOUTME: Provides loguru-backed sinks and structlog loggers for the extraction pipeline

from .config import LoggingMode, configure_logging, detect_logging_mode, get_logging_status
from .utils import LogContext, get_logger, with_async_operation_context, with_extraction_context

__all__ = [
    # Configuration
    "LoggingMode",
    "configure_logging",
    "detect_logging_mode",
    "get_logging_status",
    # Utilities
    "LogContext",
    "get_logger",
    "with_async_operation_context",
    "with_extraction_context",
]
