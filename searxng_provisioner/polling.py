"""Bounded wait-and-poll."""

from collections.abc import Callable
import time
from typing import TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


class PollTimeout(TimeoutError):
    """The condition did not hold within the allowed attempts."""

    def __init__(self, description: str, attempts: int, last_error: Exception | None = None):
        self.description = description
        self.attempts = attempts
        self.last_error = last_error
        message = f"{description} not satisfied after {attempts} attempts"
        if last_error is not None:
            message += f" (last error: {last_error})"
        super().__init__(message)


def wait_until(
    probe: Callable[[], T],
    *,
    description: str,
    attempts: int,
    interval: float,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``probe`` until it returns a truthy value, at most ``attempts`` times.

    Exceptions from ``probe`` count as a failed attempt.

    Returns:
        The first truthy probe result

    Raises:
        PollTimeout: if no attempt succeeded
    """
    last_error: Exception | None = None

    for attempt in range(1, attempts + 1):
        try:
            value = probe()
        except Exception as e:
            last_error = e
            value = None
        if value:
            logger.debug("poll_satisfied", condition=description, attempt=attempt)
            return value

        logger.debug(
            "poll_waiting",
            condition=description,
            attempt=attempt,
            max_attempts=attempts,
        )
        if attempt < attempts:
            sleep(interval)

    raise PollTimeout(description, attempts, last_error)
