"""Retry policy shared by every storage upload."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from ..logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

BackoffFn = Callable[[int], float]
SleepFn = Callable[[float], Awaitable[None]]


def linear_backoff(base_delay: float) -> BackoffFn:
    """Delay of ``base_delay * attempt`` seconds after the given failed attempt."""

    def backoff(attempt: int) -> float:
        return base_delay * attempt

    return backoff


class RetryExhausted(Exception):
    """Raised when every attempt of a retried operation failed."""

    def __init__(self, attempts: int, last_error: BaseException):
        super().__init__(f"Failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


@dataclass
class RetryPolicy:
    """Retry an async operation up to ``max_attempts`` times.

    The policy sleeps ``backoff(attempt)`` between attempts and never after
    the final one.
    """

    max_attempts: int = 3
    backoff: BackoffFn = field(default_factory=lambda: linear_backoff(1.0))
    sleep: SleepFn = asyncio.sleep

    def __post_init__(self):
        if self.max_attempts <= 0:
            self.max_attempts = 1

    async def run(self, operation: Callable[[], Awaitable[T]], *, description: str = "operation") -> T:
        last_error: BaseException | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except Exception as e:
                last_error = e
                if attempt == self.max_attempts:
                    break

                wait_time = self.backoff(attempt)
                logger.warning(
                    f"{description} attempt {attempt} failed, retrying",
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    wait_seconds=wait_time,
                    error=str(e),
                )
                await self.sleep(wait_time)

        assert last_error is not None
        raise RetryExhausted(self.max_attempts, last_error) from last_error
