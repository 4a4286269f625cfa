"""Tests for the shared upload retry policy."""

from unittest.mock import AsyncMock

import pytest

from orpheus.storage.retry import RetryExhausted, RetryPolicy, linear_backoff


class TestLinearBackoff:
    def test_delay_grows_with_attempt(self):
        backoff = linear_backoff(1.0)

        assert [backoff(attempt) for attempt in (1, 2, 3)] == [1.0, 2.0, 3.0]

    def test_custom_base(self):
        assert linear_backoff(0.5)(4) == 2.0


class TestRetryPolicy:
    @pytest.mark.asyncio
    async def test_first_attempt_success_does_not_sleep(self, retry_policy, sleep):
        operation = AsyncMock(return_value="ok")

        assert await retry_policy.run(operation) == "ok"
        assert operation.await_count == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_failures(self, retry_policy, sleep):
        operation = AsyncMock(side_effect=[OSError("one"), OSError("two"), "ok"])

        assert await retry_policy.run(operation, description="Upload") == "ok"
        assert operation.await_count == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion_keeps_last_error(self, retry_policy, sleep):
        errors = [OSError("one"), OSError("two"), OSError("three")]
        operation = AsyncMock(side_effect=errors)

        with pytest.raises(RetryExhausted) as exc_info:
            await retry_policy.run(operation)

        assert exc_info.value.attempts == 3
        assert exc_info.value.last_error is errors[2]
        assert exc_info.value.__cause__ is errors[2]
        # No sleep after the final attempt
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_non_positive_attempts_runs_once(self, sleep):
        policy = RetryPolicy(max_attempts=0, sleep=sleep)
        operation = AsyncMock(side_effect=OSError("nope"))

        with pytest.raises(RetryExhausted):
            await policy.run(operation)

        assert operation.await_count == 1
