"""Retry-with-backoff policy for async calls."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Optional, TypeVar

from issuetriage.config import DEFAULT_RETRY_DELAYS
from issuetriage.observability import log_node_event

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RetryExhaustedError(Exception):
    """Every attempt failed. ``__cause__`` holds the last failure."""

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed delay schedule. One retry per delay, after the initial attempt."""

    delays: Sequence[float] = DEFAULT_RETRY_DELAYS
    name: str = "retry"

    @property
    def max_attempts(self) -> int:
        return len(self.delays) + 1

    async def run(
        self,
        func: Callable[[], Awaitable[T]],
        sleep: Optional[Sleep] = None,
    ) -> T:
        """Await ``func()`` until it succeeds or the schedule runs out.

        Raises:
            RetryExhaustedError: If the final attempt still fails.
        """
        sleep = sleep or asyncio.sleep
        for attempt, delay in enumerate(self.delays, start=1):
            try:
                return await func()
            except Exception as e:
                log_node_event(
                    self.name,
                    "attempt failed, retrying",
                    "warning",
                    attempt=attempt,
                    delay=f"{delay}s",
                    error=e,
                )
                await sleep(delay)

        try:
            return await func()
        except Exception as e:
            raise RetryExhaustedError(self.max_attempts, e) from e
