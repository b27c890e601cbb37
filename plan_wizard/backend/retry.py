# plan_wizard/backend/retry.py
"""Retry logic for the best-effort cancel call."""

import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from plan_wizard.backend.errors import BackendError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


def is_retryable(exception: BaseException) -> bool:
    """
    Returns True if the exception should be retried.

    Retryable conditions:
    - BackendError without a status (transport failure)
    - BackendError with status in (408, 429, 500, 502, 503, 504)
    """
    if not isinstance(exception, BackendError):
        return False

    if exception.is_transport_error:
        return True

    return exception.status_code in RETRYABLE_STATUSES


async def call_with_retry(fn: Callable[[], Awaitable[T]], attempts: int = 2) -> T:
    """
    Await fn(), retrying transient backend failures.

    Only used for idempotent calls. create_job is never routed through here.

    Args:
        fn: Zero-argument coroutine factory
        attempts: Total attempts including the first

    Returns:
        Result of the first successful call

    Raises:
        BackendError: The last error once attempts are exhausted
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.25, min=0.25, max=2),
        retry=retry_if_exception(is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    return await retrying(fn)
