"""Retry policy and executor for calls to rate-limited dependencies."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
)

from news_curator.core.errors import ExhaustedRetries, FatalError, TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient(error: BaseException) -> bool:
    """Default classifier: only known transient failures are retried."""
    if isinstance(error, FatalError):
        return False
    return isinstance(error, (TransientError, httpx.TransportError))


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try and how long to wait in between."""

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    is_retryable: Callable[[BaseException], bool] = field(default=is_transient)

    def delay_for(self, retry_number: int) -> float:
        """Delay before retry ``retry_number`` (0-based)."""
        return min(self.base_delay * (2 ** retry_number), self.max_delay)


async def execute(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    description: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` under ``policy``.

    Raises:
        FatalError: the first failure was classified non-retryable.
        ExhaustedRetries: every attempt failed with a retryable error.
    """

    def _wait(state: RetryCallState) -> float:
        return policy.delay_for(state.attempt_number - 1)

    def _log_retry(state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome else None
        logger.warning(
            "%s failed (attempt %d/%d): %s; retrying in %.1fs",
            description,
            state.attempt_number,
            policy.max_attempts,
            error,
            state.next_action.sleep if state.next_action else 0.0,
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=_wait,
        retry=retry_if_exception(policy.is_retryable),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=False,
    )

    try:
        return await retrying(operation)
    except RetryError as e:
        last_error = e.last_attempt.exception()
        raise ExhaustedRetries(e.last_attempt.attempt_number, last_error) from last_error
    except FatalError:
        raise
    except Exception as e:
        raise FatalError(f"{description} failed with non-retryable error: {e}") from e
