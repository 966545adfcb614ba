# ABOUTME: Retry logic for downloads using the tenacity library
# ABOUTME: Retries transient transport failures with exponential backoff and maps httpx errors to FetchError

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from clipdrop.extraction.models import FetchConnectionError, FetchError, FetchTimeoutError
from clipdrop.utils.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


def _convert_exception(e: Exception) -> FetchError:
    """Map httpx failures onto the fetch error hierarchy."""
    if isinstance(e, httpx.TimeoutException):
        return FetchTimeoutError(f"Request timeout: {e}")
    if isinstance(e, httpx.NetworkError):
        return FetchConnectionError(f"Connection failed: {e}")
    return FetchError(f"Request failed: {e}")


def _log_retry(retry_state) -> None:
    outcome = retry_state.outcome
    logger.warning(
        "Retrying download",
        attempt=retry_state.attempt_number,
        error=str(outcome.exception()) if outcome is not None else None,
    )


def http_retry(
    max_attempts: int = 3,
    min_wait: float = 0.5,
    max_wait: float = 5.0,
    multiplier: float = 1.0,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Retry an async HTTP call on timeouts and connection failures.

    Non-transient failures (bad URLs, unsupported schemes, status errors) are raised
    on the first attempt as FetchError.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
                retry=retry_if_exception_type((FetchTimeoutError, FetchConnectionError)),
                before_sleep=_log_retry,
                reraise=True,
            ):
                with attempt:
                    try:
                        return await func(*args, **kwargs)
                    except FetchError:
                        raise
                    except (httpx.HTTPError, httpx.InvalidURL) as e:
                        raise _convert_exception(e) from e
            raise AssertionError("unreachable")  # pragma: no cover

        return wrapper

    return decorator
