"""Retry utilities for storage calls.

Implements exponential backoff with jitter for transient failures. The
default configuration makes a single attempt, so nothing is retried unless a
caller opts in with a larger ``max_attempts``.
"""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from podfeed.utils.errors import TransientStorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 1,
        max_wait_seconds: float = 30,
        min_wait_seconds: float = 1,
        jitter: bool = True,
    ):
        """Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts (including initial)
            max_wait_seconds: Maximum wait time between retries
            min_wait_seconds: Minimum wait time between retries
            jitter: Whether to add jitter to wait times
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.max_wait_seconds = max_wait_seconds
        self.min_wait_seconds = min_wait_seconds
        self.jitter = jitter


# One-shot: each remote call is made exactly once
DEFAULT_RETRY_CONFIG = RetryConfig(max_attempts=1)

# Fast configuration for testing (minimal delays)
TEST_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=0.01,
    min_wait_seconds=0.001,
    jitter=False,
)


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging.

    Args:
        retry_state: Tenacity retry state
    """
    if retry_state.outcome and retry_state.outcome.failed:
        exception = retry_state.outcome.exception()
        logger.warning(
            f"Attempt {retry_state.attempt_number} failed: "
            f"{type(exception).__name__}: {exception}"
        )


def wait_strategy(config: RetryConfig) -> Any:
    """Backoff doubling from ``min_wait_seconds`` up to ``max_wait_seconds``.

    With ``jitter``, a random extra wait of up to ``max_wait_seconds`` is added.
    """
    wait = wait_exponential(multiplier=config.min_wait_seconds, max=config.max_wait_seconds)
    if config.jitter:
        wait = wait + wait_random(0, config.max_wait_seconds)
    return wait


def with_retry(
    config: RetryConfig | None = None,
    retry_on: tuple[type[Exception], ...] = (TransientStorageError,),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for adding retry logic with exponential backoff.

    Usage:
        @with_retry(config=RetryConfig(max_attempts=4))
        def put(): ...

    Args:
        config: Retry configuration (uses DEFAULT_RETRY_CONFIG if None)
        retry_on: Exception types that trigger another attempt

    Returns:
        Decorated function with retry logic
    """
    config = config or DEFAULT_RETRY_CONFIG

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        retry_decorator = retry(
            stop=stop_after_attempt(config.max_attempts),
            wait=wait_strategy(config),
            retry=retry_if_exception_type(retry_on),
            before_sleep=log_retry_attempt,
            reraise=True,
        )

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return retry_decorator(func)(*args, **kwargs)
            except retry_on as e:
                if config.max_attempts > 1:
                    logger.error(
                        f"{func.__name__} failed after {config.max_attempts} attempts: "
                        f"{type(e).__name__}: {e}"
                    )
                raise

        return wrapper

    return decorator


def call_with_retry(
    func: Callable[..., T],
    *args: Any,
    config: RetryConfig | None = None,
    **kwargs: Any,
) -> T:
    """Call ``func`` once, or more often for transient errors if ``config`` allows."""
    return with_retry(config=config)(func)(*args, **kwargs)
