"""Retry policy for uploads that fail with a transient B2 status"""
from typing import Iterable
import structlog
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential, wait_none

from bucket_migrator.errors import DestinationError

logger = structlog.get_logger()

# 401: expired upload authorization, 503: service unavailable
DEFAULT_RETRYABLE_STATUSES = (401, 503)


class RetryPolicy:
    """
    Decides which upload failures are retried and how often.

    Only structured B2 failures whose status is in `retryable_statuses` are
    retried. Transport errors and timeouts are never retried.
    """

    def __init__(self, max_attempts: int = 2,
                 retryable_statuses: Iterable[int] = DEFAULT_RETRYABLE_STATUSES,
                 backoff: float = 0.0):
        """
        Args:
            max_attempts: Total upload attempts, including the first one
            retryable_statuses: B2 status codes worth another attempt
            backoff: Exponential backoff multiplier in seconds, 0 retries immediately
        """
        self.max_attempts = max_attempts
        self.retryable_statuses = frozenset(retryable_statuses)
        self.backoff = backoff

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            retryable_statuses=settings.RETRYABLE_STATUSES,
            backoff=settings.RETRY_BACKOFF
        )

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, DestinationError) and error.status in self.retryable_statuses

    def _wait(self):
        if self.backoff > 0:
            return wait_exponential(multiplier=self.backoff)
        return wait_none()

    def _before_sleep(self, retry_state) -> None:
        error = retry_state.outcome.exception()
        logger.warning(
            "retry.scheduled",
            attempt=retry_state.attempt_number,
            status=getattr(error, "status", None),
            error=str(error)
        )

    def attempts(self) -> AsyncRetrying:
        """ Iterate over upload attempts with `async for attempt in policy.attempts()`. """
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait(),
            retry=retry_if_exception(self.is_retryable),
            before_sleep=self._before_sleep,
            reraise=True
        )
