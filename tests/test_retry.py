"""Tests for retry utilities."""

from __future__ import annotations

import httpx
import pytest

from wikishelf.utils.retry import (
    NETWORK_EXCEPTIONS,
    RetryableError,
    retry_with_backoff,
)


class TestRetryWithBackoff:
    """Tests for the tenacity-based retry_with_backoff decorator."""

    def test_attempt_count(self) -> None:
        """max_retries counts retries after the first attempt."""
        calls = {"n": 0}

        @retry_with_backoff(max_retries=2, base_delay=0, max_delay=0, jitter=0)
        def flake() -> None:
            calls["n"] += 1
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            flake()

        assert calls["n"] == 3

    def test_success_on_first_try(self) -> None:
        """Function should return immediately on success."""
        call_count = 0

        @retry_with_backoff(max_retries=3, base_delay=0, jitter=0)
        def success_func() -> str:
            nonlocal call_count
            call_count += 1
            return "success"

        assert success_func() == "success"
        assert call_count == 1

    def test_success_after_retry(self) -> None:
        """Function should succeed after transient failures."""
        call_count = 0

        @retry_with_backoff(
            max_retries=3, base_delay=0, jitter=0, retry_exceptions=(ConnectionError,)
        )
        def fail_then_succeed() -> str:
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ConnectionError("Network error")
            return "success"

        assert fail_then_succeed() == "success"
        assert call_count == 3

    def test_non_retryable_exception_raised_immediately(self) -> None:
        """Exceptions outside retry_exceptions are not retried."""
        call_count = 0

        @retry_with_backoff(max_retries=3, base_delay=0, jitter=0, retry_exceptions=(ConnectionError,))
        def bad_value() -> None:
            nonlocal call_count
            call_count += 1
            raise ValueError("nope")

        with pytest.raises(ValueError):
            bad_value()
        assert call_count == 1

    def test_zero_retries(self) -> None:
        """max_retries=0 means a single attempt."""
        call_count = 0

        @retry_with_backoff(max_retries=0, base_delay=0, jitter=0)
        def fail() -> None:
            nonlocal call_count
            call_count += 1
            raise ConnectionError

        with pytest.raises(ConnectionError):
            fail()
        assert call_count == 1

    def test_negative_retries_rejected(self) -> None:
        """Negative retry counts are a programming error."""
        with pytest.raises(ValueError, match="max_retries"):
            retry_with_backoff(max_retries=-1)


class TestRetryableError:
    """Tests for RetryableError."""

    def test_attributes(self) -> None:
        """Status code and original exception are kept."""
        original = OSError("x")
        err = RetryableError("rate limited", original=original, status_code=429)
        assert str(err) == "rate limited"
        assert err.status_code == 429
        assert err.original is original

    def test_network_exceptions(self) -> None:
        """Transient transport errors are covered by NETWORK_EXCEPTIONS."""
        assert RetryableError in NETWORK_EXCEPTIONS
        assert httpx.ConnectError in NETWORK_EXCEPTIONS
        assert httpx.TimeoutException in NETWORK_EXCEPTIONS
        assert httpx.HTTPStatusError not in NETWORK_EXCEPTIONS
