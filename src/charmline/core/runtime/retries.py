from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt, wait_incrementing

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    retry_delay_seconds: float = 1.0

    def delay_for(self, attempt: int) -> float:
        """Linear backoff: the wait after attempt ``n`` fails is ``delay * n``."""
        return self.retry_delay_seconds * max(1, attempt)


def _last_result(state: RetryCallState):
    return state.outcome.result() if state.outcome else None


async def run_with_retry(
    fn: Callable[[int], Awaitable[T]],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[T], bool],
    on_attempt: Callable[[int, T], None] | None = None,
    sleep: SleepFn | None = None,
) -> T:
    """Call ``fn(attempt)`` until ``should_retry`` rejects its value or the attempt budget runs out.

    The last value is returned either way; exceptions raised by ``fn`` propagate.
    """
    attempt = 0

    async def _call() -> T:
        nonlocal attempt
        attempt += 1
        value = await fn(attempt)
        if on_attempt:
            on_attempt(attempt, value)
        return value

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, policy.max_attempts)),
        wait=wait_incrementing(start=policy.retry_delay_seconds, increment=policy.retry_delay_seconds),
        retry=retry_if_result(should_retry),
        retry_error_callback=_last_result,
        sleep=sleep or asyncio.sleep,
        reraise=True,
    )
    return await retrying(_call)
