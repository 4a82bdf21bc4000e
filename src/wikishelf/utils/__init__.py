"""Shared utilities (retry, circuit breaker)."""

from wikishelf.utils.circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState
from wikishelf.utils.retry import NETWORK_EXCEPTIONS, RetryableError, retry_with_backoff

__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitState",
    "NETWORK_EXCEPTIONS",
    "RetryableError",
    "retry_with_backoff",
]
