"""Circuit breaker for the MediaWiki API.

Stops hammering Wikipedia after repeated network failures. States:
- CLOSED: normal operation, requests pass through
- OPEN: too many recent failures, requests are rejected immediately
- HALF_OPEN: recovery window elapsed, trial requests are let through

Usage:
    with wikipedia_breaker:
        response = client.get(url, params=params)
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

import httpx

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """Raised when circuit is open and request is rejected."""

    def __init__(self, service_name: str, retry_after: float) -> None:
        self.service_name = service_name
        self.retry_after = retry_after
        super().__init__(
            f"Circuit breaker for '{service_name}' is OPEN. "
            f"Retry after {retry_after:.1f} seconds."
        )


@dataclass
class CircuitBreaker:
    """
    Thread-safe circuit breaker used as a context manager around service calls.

    Args:
        service_name: Human-readable name for logging
        failure_threshold: Consecutive failures before opening the circuit
        recovery_timeout: Seconds to stay open before allowing a trial request
        success_threshold: Trial successes needed to close the circuit again
        exceptions: Exception types counted as failures (others pass through)
    """

    service_name: str
    failure_threshold: int = 5
    recovery_timeout: float = 60.0
    success_threshold: int = 2
    exceptions: tuple[type[Exception], ...] = (Exception,)

    _state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    _failure_count: int = field(default=0, init=False)
    _success_count: int = field(default=0, init=False)
    _opened_at: float = field(default=0.0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def _seconds_open(self) -> float:
        if self._opened_at == 0:
            return float("inf")
        return time.monotonic() - self._opened_at

    def _allow(self) -> bool:
        with self._lock:
            if self._state is CircuitState.OPEN:
                if self._seconds_open() < self.recovery_timeout:
                    return False
                self._state = CircuitState.HALF_OPEN
                self._success_count = 0
                logger.info(f"Circuit breaker '{self.service_name}' entering HALF_OPEN state")
            return True

    def _on_success(self) -> None:
        with self._lock:
            if self._state is CircuitState.HALF_OPEN:
                self._success_count += 1
                if self._success_count >= self.success_threshold:
                    self._state = CircuitState.CLOSED
                    self._failure_count = 0
                    logger.info(f"Circuit breaker '{self.service_name}' CLOSED (service recovered)")
            else:
                self._failure_count = 0

    def _on_failure(self, exc: BaseException) -> None:
        with self._lock:
            self._failure_count += 1
            if self._state is CircuitState.HALF_OPEN or (
                self._state is CircuitState.CLOSED
                and self._failure_count >= self.failure_threshold
            ):
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()
                logger.warning(
                    f"Circuit breaker '{self.service_name}' OPEN after "
                    f"{self._failure_count} failures: {exc}"
                )

    def reset(self) -> None:
        """Manually reset the circuit breaker to closed state."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._success_count = 0
            self._opened_at = 0.0

    def __enter__(self) -> CircuitBreaker:
        if not self._allow():
            retry_after = self.recovery_timeout - self._seconds_open()
            raise CircuitOpenError(self.service_name, max(0.0, retry_after))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> Literal[False]:
        if exc_val is None:
            self._on_success()
        elif isinstance(exc_val, self.exceptions):
            self._on_failure(exc_val)
        return False


wikipedia_breaker = CircuitBreaker(
    service_name="wikipedia-api",
    failure_threshold=5,
    recovery_timeout=60.0,
    exceptions=(
        ConnectionError,
        TimeoutError,
        httpx.TimeoutException,
        httpx.ConnectError,
        httpx.ReadError,
    ),
)


def get_breaker_status() -> dict[str, dict[str, Any]]:
    """Get status of the service circuit breakers."""
    return {
        wikipedia_breaker.service_name: {
            "state": wikipedia_breaker.state.value,
            "failure_count": wikipedia_breaker.failure_count,
        }
    }


def reset_all_breakers() -> None:
    """Reset all circuit breakers to closed state."""
    wikipedia_breaker.reset()
