"""Bounded retry for filesystem operations."""
from __future__ import annotations

import logging
from typing import Callable, TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Attempts per folder deletion (first try included)
DELETE_ATTEMPTS = 3


def retry(
    operation: Callable[[], T],
    max_attempts: int = DELETE_ATTEMPTS,
    delay: float = 0.0,
    retry_on: tuple[type[BaseException], ...] = (OSError,),
    description: str = "operation",
) -> T:
    """Run operation until it succeeds or max_attempts is used up.

    Args:
        operation: Zero-argument callable to run.
        max_attempts: Total number of attempts, at least 1.
        delay: Seconds to wait between attempts.
        retry_on: Exception types that trigger another attempt.
        description: Name used in log messages.

    Returns:
        Whatever operation returns on its first successful attempt.

    Raises:
        The exception of the last attempt, unchanged.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay),
        retry=retry_if_exception_type(retry_on),
        before_sleep=before_sleep_log(logger, logging.DEBUG),
        reraise=True,
    )
    logger.debug("Running %s (up to %d attempts)", description, max_attempts)
    return retrying(operation)
