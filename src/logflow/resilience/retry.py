"""
Retry with exponential backoff for asynchronous delivery.

RetryManager awaits between attempts instead of blocking the event loop.
Cancellation is never retried.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Attempts and backoff for one delivery.

    The wait after failed attempt ``n`` (1-based) is
    ``min(base_delay * multiplier ** n, max_delay)`` seconds.
    """

    max_attempts: int = 3
    base_delay: float = 0.1
    max_delay: float = 30.0
    multiplier: float = 2.0

    def delay(self, attempt: int) -> float:
        return min(self.base_delay * (self.multiplier**attempt), self.max_delay)


class RetryManager:
    """Runs a coroutine function until it succeeds or the policy gives up.

    The last exception is re-raised once all attempts are exhausted.
    """

    def __init__(self, policy: RetryPolicy, name: str = "operation"):
        self.policy = policy
        self.name = name
        self.attempts = 0

    async def execute_with_retry(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Await a coroutine function with retry logic.

        Args:
            func: Coroutine function to execute
            *args, **kwargs: Arguments to pass to function

        Returns:
            Function result

        Raises:
            Last exception if all attempts failed
        """
        max_attempts = max(1, self.policy.max_attempts)
        for attempt in range(1, max_attempts + 1):
            self.attempts = attempt
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                if attempt >= max_attempts:
                    logger.debug(f"{self.name} failed on final attempt {attempt}: {e}")
                    raise
                delay = self.policy.delay(attempt)
                logger.warning(
                    f"{self.name} failed (attempt {attempt}/{max_attempts}), retrying in {delay:.3f}s: {e}"
                )
                if delay > 0:
                    await asyncio.sleep(delay)
                continue
            if attempt > 1:
                logger.info(f"{self.name} succeeded after {attempt} attempts")
            return result
