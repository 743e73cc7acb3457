"""
Unit tests for retry with backoff.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from logflow.resilience import RetryManager, RetryPolicy


@pytest.mark.unit
class TestRetryPolicy:
    """Test delay calculation."""

    def test_exponential_delay(self):
        policy = RetryPolicy(base_delay=1.0)
        assert [policy.delay(n) for n in (1, 2, 3)] == [2.0, 4.0, 8.0]

    def test_custom_multiplier(self):
        assert RetryPolicy(base_delay=1.0, multiplier=3.0).delay(2) == 9.0

    def test_delay_is_capped(self):
        assert RetryPolicy(base_delay=1.0, max_delay=30.0).delay(10) == 30.0


@pytest.mark.unit
class TestRetryManager:
    """Test RetryManager.execute_with_retry."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self):
        func = AsyncMock(return_value="ok")
        manager = RetryManager(RetryPolicy(base_delay=0))

        assert await manager.execute_with_retry(func, 1, key="v") == "ok"
        func.assert_awaited_once_with(1, key="v")
        assert manager.attempts == 1

    @pytest.mark.asyncio
    async def test_success_after_failures(self):
        func = AsyncMock(side_effect=[ConnectionError("down"), ConnectionError("down"), "ok"])
        manager = RetryManager(RetryPolicy(max_attempts=3, base_delay=0))

        assert await manager.execute_with_retry(func) == "ok"
        assert func.await_count == 3
        assert manager.attempts == 3

    @pytest.mark.asyncio
    async def test_final_failure_is_raised(self):
        func = AsyncMock(side_effect=ConnectionError("down"))
        manager = RetryManager(RetryPolicy(max_attempts=3, base_delay=0))

        with pytest.raises(ConnectionError):
            await manager.execute_with_retry(func)

        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_zero_attempts_still_tries_once(self):
        func = AsyncMock(return_value="ok")

        assert await RetryManager(RetryPolicy(max_attempts=0)).execute_with_retry(func) == "ok"
        func.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancellation_is_not_retried(self):
        func = AsyncMock(side_effect=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await RetryManager(RetryPolicy(base_delay=0)).execute_with_retry(func)

        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_waits_with_exponential_backoff(self):
        func = AsyncMock(side_effect=ConnectionError("down"))
        policy = RetryPolicy(max_attempts=3, base_delay=0.5)

        with patch("logflow.resilience.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(ConnectionError):
                await RetryManager(policy).execute_with_retry(func)

        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_zero_delay_does_not_sleep(self):
        func = AsyncMock(side_effect=[ValueError("once"), "ok"])

        with patch("logflow.resilience.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await RetryManager(RetryPolicy(base_delay=0)).execute_with_retry(func)

        sleep.assert_not_awaited()
