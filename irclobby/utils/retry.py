"""Opt-in retry for callers of the lobby session, using Tenacity.

The session itself never retries. Callers that want to survive a flaky
connection wrap individual operations here.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import IRC_RETRY_MAX_ATTEMPTS, IRC_RETRY_MAX_WAIT
from ..errors.internal import NetworkError, RetryExhaustedError
from ..logs.logger import logger


async def retry_network_operation[T](  # type: ignore[valid-type]
    operation: Callable[[], Awaitable[T]],
    *,
    name: str = "operation",
    max_attempts: int = IRC_RETRY_MAX_ATTEMPTS,
    multiplier: float = 1.0,
    max_wait: float = IRC_RETRY_MAX_WAIT,
) -> T:
    """Run ``operation`` and retry it on NetworkError with exponential backoff.

    Any other exception propagates immediately.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt.
        name: Label used in log events.
        max_attempts: Total attempts including the first.
        multiplier: Backoff multiplier in seconds (0 disables waiting).
        max_wait: Upper bound on a single wait.

    Raises:
        RetryExhaustedError: Every attempt raised NetworkError.
    """

    def before_sleep(retry_state: RetryCallState) -> None:
        logger.log_event(
            "retry",
            "attempt",
            level=logging.WARNING,
            operation=name,
            attempt=retry_state.attempt_number + 1,
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=multiplier, max=max_wait),
        retry=retry_if_exception_type(NetworkError),
        before_sleep=before_sleep,
    )

    try:
        return await retrying(operation)
    except RetryError as e:
        final = e.last_attempt.exception()
        logger.log_event(
            "retry",
            "exhausted",
            level=logging.ERROR,
            operation=name,
            attempts=max_attempts,
        )
        raise RetryExhaustedError(
            f"{name} failed after {max_attempts} attempts",
            attempts=max_attempts,
            final_exception=final,
        ) from final
