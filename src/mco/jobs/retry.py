"""Classification-aware retry with exponential backoff.

An operation is attempted up to `max_retries` times in total. Failures
classified as permanent are re-raised immediately; transient ones are
retried after base_delay * backoff_multiplier ** (attempt - 1) seconds.
Cancellation, whether raised by the operation or observed while waiting,
stops the loop at once.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from mco.domain.enums import ErrorClassification
from mco.exceptions import CancellationError, RetryExhaustedError
from mco.executor.cancellation import CancellationToken
from mco.jobs.classification import classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry limits and backoff shape.

    Attributes:
        max_retries: Total number of attempts (1 disables retrying).
        base_delay: Delay in seconds before the second attempt.
        backoff_multiplier: Factor applied to the delay after each attempt.
        max_delay: Optional ceiling on any single delay.
    """

    max_retries: int = 3
    base_delay: float = 1.0
    backoff_multiplier: float = 2.0
    max_delay: float | None = None

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be non-negative, got {self.base_delay}")
        if self.backoff_multiplier < 1:
            raise ValueError(
                f"backoff_multiplier must be at least 1, got {self.backoff_multiplier}"
            )

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after a failed attempt (1-based)."""
        delay = self.base_delay * self.backoff_multiplier ** (attempt - 1)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay


class RetryExecutor:
    """Run an operation under a RetryPolicy."""

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            policy: Retry policy. Defaults to RetryPolicy().
            sleep: Replacement for the backoff wait, for tests. When not
                given, the wait is interruptible by the cancellation token.
        """
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    def _wait(self, delay: float, token: CancellationToken | None) -> None:
        if self._sleep is not None:
            self._sleep(delay)
        elif token is not None:
            token.wait(delay)
        else:
            time.sleep(delay)
        if token is not None:
            token.throw_if_cancelled()

    def run(
        self,
        operation: Callable[[int], T],
        token: CancellationToken | None = None,
    ) -> T:
        """Run `operation(attempt)` until it succeeds or retrying is pointless.

        Args:
            operation: Callable taking the 1-based attempt number.
            token: Optional cancellation token checked before every attempt
                and during backoff waits.

        Returns:
            The operation's result.

        Raises:
            CancellationError: If cancellation was observed.
            RetryExhaustedError: If every attempt failed with a transient
                error.
            Exception: A permanent failure, re-raised unchanged.
        """
        max_attempts = self.policy.max_retries
        last_error: Exception | None = None

        for attempt in range(1, max_attempts + 1):
            if token is not None:
                token.throw_if_cancelled()
            try:
                result = operation(attempt)
            except CancellationError:
                raise
            except Exception as e:
                if token is not None and token.is_cancelled:
                    raise CancellationError() from e

                if classify_error(e) == ErrorClassification.PERMANENT:
                    logger.info(
                        "Attempt %d/%d failed with a non-retryable error: %s",
                        attempt,
                        max_attempts,
                        e,
                    )
                    raise

                last_error = e
                if attempt == max_attempts:
                    logger.warning(
                        "Attempt %d/%d failed: %s", attempt, max_attempts, e
                    )
                    break

                delay = self.policy.delay_for(attempt)
                logger.warning(
                    "Attempt %d/%d failed: %s (retrying in %.2fs)",
                    attempt,
                    max_attempts,
                    e,
                    delay,
                )
                self._wait(delay, token)
            else:
                if attempt > 1:
                    logger.info("Succeeded on attempt %d/%d", attempt, max_attempts)
                return result

        assert last_error is not None
        raise RetryExhaustedError(last_error, max_attempts) from last_error
