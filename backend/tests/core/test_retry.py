"""Tests for the exponential retry helper."""
from unittest.mock import AsyncMock, call

import pytest

from core.retry import with_exponential_retry


class TransientError(Exception):
    """Error that should be retried."""


def flaky(failures: int, result: str = "ok") -> AsyncMock:
    """Operation that raises TransientError `failures` times, then returns `result`."""
    return AsyncMock(side_effect=[TransientError()] * failures + [result])


class TestWithExponentialRetry:
    """Tests for with_exponential_retry."""

    async def test__success_first_try__no_sleep(self) -> None:
        """A successful operation is awaited once."""
        operation = flaky(0)
        sleep = AsyncMock()

        assert await with_exponential_retry(operation, sleep=sleep) == "ok"
        assert operation.await_count == 1
        sleep.assert_not_awaited()

    async def test__retries_with_doubling_delay(self) -> None:
        """Delays double between attempts."""
        operation = flaky(3)
        sleep = AsyncMock()

        result = await with_exponential_retry(
            operation, attempts=5, base_delay=0.5, max_delay=60, sleep=sleep,
        )

        assert result == "ok"
        assert operation.await_count == 4
        assert sleep.await_args_list == [call(0.5), call(1.0), call(2.0)]

    async def test__delay_capped_at_max(self) -> None:
        """No single delay exceeds max_delay."""
        sleep = AsyncMock()

        await with_exponential_retry(
            flaky(4), attempts=5, base_delay=1, max_delay=3, sleep=sleep,
        )

        assert sleep.await_args_list == [call(1), call(2), call(3), call(3)]

    async def test__exhausted__raises_last_error(self) -> None:
        """After the final attempt the error propagates."""
        operation = flaky(5)
        sleep = AsyncMock()

        with pytest.raises(TransientError):
            await with_exponential_retry(operation, attempts=3, sleep=sleep)

        assert operation.await_count == 3
        assert sleep.await_count == 2

    async def test__unlisted_errors_not_retried(self) -> None:
        """Exceptions outside retry_on propagate immediately."""
        operation = AsyncMock(side_effect=KeyError("x"))
        sleep = AsyncMock()

        with pytest.raises(KeyError):
            await with_exponential_retry(
                operation, retry_on=(TransientError,), sleep=sleep,
            )

        assert operation.await_count == 1
        sleep.assert_not_awaited()

    async def test__attempts_must_be_positive(self) -> None:
        """Zero attempts is rejected."""
        with pytest.raises(ValueError, match="attempts"):
            await with_exponential_retry(flaky(0), attempts=0)
