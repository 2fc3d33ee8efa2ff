"""Bounded exponential backoff for result-returning operations."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from arxivsync.result import Ok, Result

log = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class RetryOptions:
    max_attempts: int = 3
    initial_delay: float = 1.0  # seconds
    max_delay: float = 10.0
    backoff_multiplier: float = 2.0


DEFAULT_RETRY_OPTIONS = RetryOptions()


def retry(
    operation: Callable[[], "Result[T, E]"],
    options: RetryOptions = DEFAULT_RETRY_OPTIONS,
    should_retry: Optional[Callable[[E], bool]] = None,
) -> "Result[T, E]":
    """Call *operation* until it succeeds or attempts run out.

    Delays double after each failure (1s, 2s, 4s, ... capped at max_delay).
    Failures rejected by *should_retry* are returned immediately. The last
    failure is returned when every attempt fails.
    """
    delay = options.initial_delay
    result = operation()
    for attempt in range(1, options.max_attempts):
        if isinstance(result, Ok):
            return result
        if should_retry is not None and not should_retry(result.error):
            return result
        log.warning(
            "Attempt %d/%d failed (%s), retrying in %.1fs",
            attempt, options.max_attempts, result.error, delay,
        )
        time.sleep(delay)
        delay = min(delay * options.backoff_multiplier, options.max_delay)
        result = operation()
    return result
