"""Retry logic using tenacity library.

Provides exponential backoff with jitter for network operations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

import httpx
from tenacity import (
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity import (
    retry as _retry,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


def retry_with_backoff(
    *,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    jitter: float = 1.0,
    retry_exceptions: tuple[type[BaseException], ...] | None = None,
    logger_instance: logging.Logger | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry decorator with exponential backoff and jitter.

    Args:
        max_retries: Number of retries AFTER the first attempt (total = max_retries + 1)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        jitter: Maximum random jitter added to each delay, in seconds
        retry_exceptions: Tuple of exception types to retry on (default: Exception)
        logger_instance: Logger for retry warnings (uses module logger if None)

    Returns:
        Decorator function

    Example:
        @retry_with_backoff(max_retries=3, base_delay=1.0, retry_exceptions=NETWORK_EXCEPTIONS)
        def fetch_page():
            return client.get(url)
    """
    if max_retries < 0:
        raise ValueError("max_retries must be >= 0")

    log = logger_instance or logger

    return _retry(
        reraise=True,
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential_jitter(initial=base_delay, max=max_delay, jitter=jitter),
        retry=retry_if_exception_type(retry_exceptions or (Exception,)),
        before_sleep=before_sleep_log(log, logging.WARNING),
    )


class RetryableError(Exception):
    """Exception that explicitly indicates the operation should be retried.

    Raised for HTTP responses that signal a transient condition
    (rate limiting, server overload) so they share the network retry path.
    """

    def __init__(
        self,
        message: str,
        original: Exception | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.original = original
        self.status_code = status_code


NETWORK_EXCEPTIONS: tuple[type[Exception], ...] = (
    ConnectionError,
    TimeoutError,
    RetryableError,
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.ReadError,
    httpx.RemoteProtocolError,
)
