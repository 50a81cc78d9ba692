"""Exponential backoff for transient service failures."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, TypeVar

from skinflow.exceptions.server_errors import TransientServiceError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay_ms(initial_delay_ms: int, retry_number: int) -> int:
    """Delay before retry number `retry_number` (1-based)."""
    return initial_delay_ms * 2 ** (retry_number - 1)


def retry_with_backoff(
    func: Callable[[], T],
    *,
    max_attempts: int = 3,
    initial_delay_ms: int = 1000,
    on_retry: Callable[[int, int, int], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call func, retrying transient failures with exponential backoff.

    Only TransientServiceError is retried; every other exception propagates
    on the first occurrence. on_retry(attempt, max_attempts, delay_ms) is
    invoked before each wait, where attempt is the retry about to happen.

    Args:
        func: Zero-argument callable performing one attempt.
        max_attempts: Total attempts including the first.
        initial_delay_ms: Delay before the first retry; doubled after.
        on_retry: Observer notified before each wait.
        sleep: Blocking sleep taking seconds.

    Returns:
        The first successful result.

    Raises:
        TransientServiceError: When the last attempt also fails transiently.
    """
    attempt = 1
    while True:
        try:
            return func()
        except TransientServiceError as error:
            if attempt >= max_attempts:
                logger.error("Giving up after %d attempts: %s", attempt, error.message)
                raise
            delay_ms = backoff_delay_ms(initial_delay_ms, attempt)
            logger.warning(
                "Attempt %d/%d failed, retrying in %dms: %s",
                attempt,
                max_attempts,
                delay_ms,
                error.message,
            )
            if on_retry is not None:
                on_retry(attempt, max_attempts, delay_ms)
            sleep(delay_ms / 1000)
            attempt += 1
