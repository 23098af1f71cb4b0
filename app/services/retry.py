"""Sequential retry with blocking backoff for outbound HTTP calls."""

import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

import httpx

from app.logging_config import get_logger

logger = get_logger("retry")

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({500, 503})


def exponential_backoff(attempt: int) -> float:
    """2s, 4s, 8s ... after the 1st, 2nd, 3rd failed attempt."""
    return float(2**attempt)


def linear_backoff(attempt: int) -> float:
    """1s, 2s, 3s ... after the 1st, 2nd, 3rd failed attempt."""
    return float(attempt)


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    backoff: Callable[[int], float] = exponential_backoff
    retry_statuses: frozenset = field(default=RETRYABLE_STATUS_CODES)
    retry_exceptions: tuple = (httpx.TransportError,)

    def is_retryable_status(self, status_code: int | None) -> bool:
        return status_code in self.retry_statuses


CHAT_RETRY_POLICY = RetryPolicy(attempts=3, backoff=exponential_backoff)
FILE_RETRY_POLICY = RetryPolicy(attempts=3, backoff=linear_backoff)


def call_with_retry(
    func: Callable[[], T],
    policy: RetryPolicy,
    status_of: Callable[[T], int | None],
    operation: str = "request",
) -> T:
    """
    Call func up to policy.attempts times, sleeping between attempts.

    A result whose status is retryable, or one of policy.retry_exceptions,
    triggers another attempt. Any other result is returned immediately.
    When attempts run out the last result is returned, or the last
    exception re-raised.
    """
    if policy.attempts < 1:
        raise ValueError("attempts must be >= 1")

    for attempt in range(1, policy.attempts + 1):
        is_last = attempt == policy.attempts
        try:
            result = func()
        except policy.retry_exceptions as exc:
            logger.warning(
                f"{operation} attempt {attempt}/{policy.attempts} failed: {exc}",
                extra={"context": {"operation": operation, "attempt": attempt}},
            )
            if is_last:
                raise
        else:
            status = status_of(result)
            if not policy.is_retryable_status(status) or is_last:
                return result
            logger.warning(
                f"{operation} attempt {attempt}/{policy.attempts} returned {status}",
                extra={"context": {"operation": operation, "attempt": attempt, "status": status}},
            )

        wait_seconds = policy.backoff(attempt)
        logger.info(f"Retrying {operation} in {wait_seconds:g}s (attempt {attempt}/{policy.attempts})")
        time.sleep(wait_seconds)

    raise RuntimeError("unreachable")  # pragma: no cover
