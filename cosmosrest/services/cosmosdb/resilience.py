"""
Retry on precondition failures.

Concurrent writers racing on the same resource make If-Match requests
fail with 412 Precondition Failed. The operation is re-run (typically
re-reading the resource first) with a linearly growing delay. No other
error is retried.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from cosmosrest.core.logging_config import log_with_context

from .constants import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_BACKOFF
from .exceptions import CosmosHTTPError, is_error_status_code

logger = logging.getLogger(__name__)

T = TypeVar('T')

PRECONDITION_FAILED = 412


def retry_on_precondition_failed(
    operation: Callable[[], T],
    max_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    backoff: float = DEFAULT_RETRY_BACKOFF,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run an operation, retrying while it fails with 412 Precondition Failed.

    Args:
        operation: Closure performing the whole read-modify-write
        max_attempts: Maximum number of invocations
        backoff: Delay in seconds multiplied by the attempt index
        sleep: Sleep function

    Returns:
        Result of the first successful invocation

    Raises:
        CosmosHTTPError: The last 412 error if every attempt conflicted
        Exception: Any other error from the operation, unchanged
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    operation_name = getattr(operation, "__name__", repr(operation))
    last_error: Optional[CosmosHTTPError] = None

    for attempt in range(max_attempts):
        try:
            result = operation()
        except CosmosHTTPError as e:
            if not is_error_status_code(e, PRECONDITION_FAILED):
                raise
            last_error = e
            if attempt + 1 >= max_attempts:
                break

            delay = attempt * backoff
            log_with_context(
                logger,
                logging.WARNING,
                f"Precondition failed, retrying: {operation_name}",
                operation=operation_name,
                attempt=attempt + 1,
                max_attempts=max_attempts,
                retry_delay_seconds=delay,
            )
            sleep(delay)
            continue

        if attempt > 0:
            logger.info(f"Operation succeeded after {attempt + 1} attempts: {operation_name}")
        return result

    logger.error(f"Operation still conflicting after {max_attempts} attempts: {operation_name}")
    raise last_error


def with_retry_on_precondition_failed(
    max_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    backoff: float = DEFAULT_RETRY_BACKOFF,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator form of retry_on_precondition_failed.

    Usage:
        @with_retry_on_precondition_failed(max_attempts=3)
        def bump_counter(...):
            ...
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            def call() -> Any:
                return func(*args, **kwargs)
            call.__name__ = func.__name__

            return retry_on_precondition_failed(
                call,
                max_attempts=max_attempts,
                backoff=backoff,
                sleep=sleep,
            )
        return wrapper
    return decorator
