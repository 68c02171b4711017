"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Retry utilities for file persistence.

Artifact writes and event journal appends go through these helpers so that
transient filesystem errors are retried with exponential backoff. Ledger
operations themselves are never retried.
"""

import functools
import time
from typing import Any, Callable, Tuple, Type, TypeVar

from tributary.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

TRANSIENT_EXCEPTIONS: Tuple[Type[Exception], ...] = (OSError,)


def _run_with_retry(
    operation: Callable[[], T],
    operation_name: str,
    max_retries: int,
    base_delay: float,
    backoff_factor: float,
    transient_exceptions: Tuple[Type[Exception], ...],
) -> T:
    last_exception = None

    for attempt in range(max_retries + 1):  # +1 for initial attempt
        try:
            return operation()
        except transient_exceptions as e:
            last_exception = e

            if attempt < max_retries:
                delay = base_delay * (backoff_factor ** attempt)
                logger.warning(
                    "transient_failure",
                    operation=operation_name,
                    attempt=attempt + 1,
                    max_attempts=max_retries + 1,
                    delay_seconds=delay,
                    error=str(e),
                )
                time.sleep(delay)
            else:
                logger.error(
                    "permanent_failure",
                    operation=operation_name,
                    total_attempts=max_retries + 1,
                    error=str(e),
                    exc_info=True,
                )

    raise last_exception


def retry_on_transient_failure(
    max_retries: int = 3,
    base_delay: float = 0.1,
    backoff_factor: float = 2.0,
    transient_exceptions: Tuple[Type[Exception], ...] = TRANSIENT_EXCEPTIONS,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator to retry a function on transient failures with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        base_delay: Initial delay in seconds before first retry (default: 0.1)
        backoff_factor: Multiplier for delay between retries (default: 2.0)
        transient_exceptions: Exception types to retry on (default: OSError)

    Returns:
        Decorated function that retries on transient failures

    Example:
        @retry_on_transient_failure(max_retries=3)
        def write_file(path, content):
            with open(path, 'w') as f:
                f.write(content)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return _run_with_retry(
                lambda: func(*args, **kwargs),
                func.__name__,
                max_retries,
                base_delay,
                backoff_factor,
                transient_exceptions,
            )

        return wrapper
    return decorator


def retry_write_operation(
    operation: Callable[[], T],
    operation_name: str,
    max_retries: int = 3,
    base_delay: float = 0.1,
    backoff_factor: float = 2.0,
) -> T:
    """
    Execute a write operation with retry logic.

    Functional alternative to the decorator, used where the retry budget
    comes from configuration at call time.

    Raises:
        OSError: The last exception if all retries fail
    """
    return _run_with_retry(
        operation,
        operation_name,
        max_retries,
        base_delay,
        backoff_factor,
        TRANSIENT_EXCEPTIONS,
    )
