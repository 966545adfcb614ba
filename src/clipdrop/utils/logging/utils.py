# ABOUTME: Structured logger helpers: named structlog loggers and bound extraction contexts
# ABOUTME: Also provides a decorator that logs start, finish and failure of async operations

import functools
import time
import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import structlog

F = TypeVar("F", bound=Callable[..., Any])

ROOT_LOGGER_NAME = "clipdrop"


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Structlog logger named after the calling module (pass ``__name__``)."""
    return structlog.get_logger(name or ROOT_LOGGER_NAME)


def generate_operation_id() -> str:
    """Short random id tying together the log lines of one operation."""
    return uuid.uuid4().hex[:8]


def with_async_operation_context(operation: str, **context) -> Callable[[F], F]:
    """Log the start, duration and outcome of every call to the decorated coroutine.

    Exceptions are logged with their type and re-raised unchanged.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            log = get_logger(func.__module__).bind(
                operation=operation,
                operation_id=generate_operation_id(),
                function=func.__name__,
                **context,
            )
            started = time.perf_counter()
            log.debug(f"{operation} started")

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                log.error(
                    f"{operation} failed",
                    duration_seconds=round(time.perf_counter() - started, 3),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            log.debug(f"{operation} finished", duration_seconds=round(time.perf_counter() - started, 3))
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


class LogContext:
    """Bind key/value context to a logger for the duration of a ``with`` block."""

    def __init__(self, logger: structlog.stdlib.BoundLogger, **context):
        self.logger = logger
        self.context = context
        self.bound: structlog.stdlib.BoundLogger | None = None

    def __enter__(self) -> structlog.stdlib.BoundLogger:
        self.bound = self.logger.bind(**self.context)
        return self.bound

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None and self.bound is not None:
            self.bound.error("Block exited with an exception", error=str(exc_val), error_type=exc_type.__name__)


def with_extraction_context(target_directory: Path | str, **context) -> LogContext:
    """Logging context for one extraction, keyed by a fresh operation id and its target directory."""
    return LogContext(
        get_logger("clipdrop.extraction"),
        operation_id=generate_operation_id(),
        target_directory=str(target_directory),
        **context,
    )
