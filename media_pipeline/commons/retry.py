"""Exponential-backoff retry for calls to rate-limited providers."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from media_pipeline.commons.errors import RetryableError
from media_pipeline.commons.settings.models import RetrySettings
from media_pipeline.commons.telemetry import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


def _log_before_sleep(description: str) -> Callable[[RetryCallState], None]:
    def log(state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome else None
        delay = state.next_action.sleep if state.next_action else 0.0
        logger.warning(
            f"{description} failed, retrying",
            extra={
                "attempt": state.attempt_number,
                "retry_in_seconds": delay,
                "error": str(error),
            },
        )

    return log


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    policy: RetrySettings | None = None,
    description: str = "operation",
    retry_on: tuple[type[BaseException], ...] = (RetryableError,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the attempt budget is spent.

    Only exceptions matching ``retry_on`` are retried. Delays start at
    ``policy.initial_delay_seconds`` and double on every attempt, capped at
    ``policy.max_delay_seconds``. The final error is re-raised unchanged.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt.
        policy: Attempt count and delay bounds. Defaults to ``RetrySettings()``.
        description: Label used in retry log lines.
        retry_on: Exception types that trigger another attempt.
        sleep: Awaitable sleep function, replaceable in tests.

    Returns:
        The operation's result.
    """
    policy = policy or RetrySettings()
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(retry_on),
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(
            multiplier=policy.initial_delay_seconds,
            max=policy.max_delay_seconds,
        ),
        sleep=sleep,
        before_sleep=_log_before_sleep(description),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            result = await operation()
    return result
