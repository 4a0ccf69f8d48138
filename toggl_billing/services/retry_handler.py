"""
Retry handler with exponential backoff and jitter for HTTP calls.
"""

import logging
import random
import time
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)


class RetryExhaustedException(Exception):
    """Raised when all retry attempts have been exhausted."""

    def __init__(self, message: str, last_exception: Optional[Exception] = None):
        super().__init__(message)
        self.last_exception = last_exception


def is_transient_error(exception: Exception) -> bool:
    """
    Decide whether a failed request is worth retrying.

    Rate limiting (429), server errors (5xx), dropped connections and
    timeouts are transient; everything else is fatal.
    """
    if isinstance(exception, requests.exceptions.HTTPError):
        response = exception.response
        if response is None:
            return False
        return response.status_code == 429 or 500 <= response.status_code < 600

    return isinstance(
        exception,
        (requests.exceptions.ConnectionError, requests.exceptions.Timeout),
    )


class RetryHandler:
    """
    Runs callables with bounded retries, exponential backoff and jitter.

    With ``max_retries=0`` (the default) the first failure propagates
    unchanged, so transient network problems abort the run.
    """

    def __init__(
        self,
        max_retries: int = 0,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2,
        jitter_factor: float = 0.1,
        retry_condition: Optional[Callable[[Exception], bool]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize retry handler.

        Args:
            max_retries: Maximum number of retry attempts after the first call
            base_delay: Base delay for exponential backoff (seconds)
            max_delay: Maximum delay between retries (seconds)
            exponential_base: Base for exponential backoff calculation
            jitter_factor: Factor for random jitter (0.0 to 1.0)
            retry_condition: Predicate deciding whether an exception is retried
            sleep: Sleep function, replaceable in tests
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")

        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter_factor = jitter_factor
        self.retry_condition = retry_condition or is_transient_error
        self._sleep = sleep

        self._total_calls = 0
        self._total_retries = 0

    def _calculate_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (0-based), capped and jittered."""
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        jitter = random.uniform(-self.jitter_factor, self.jitter_factor) * delay
        return max(0.0, delay + jitter)

    def execute_with_retry(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute ``func`` with retry logic.

        Raises:
            RetryExhaustedException: If a transient error persists past
                ``max_retries`` retries
            Exception: The original exception if it is not retryable, or if
                retries are disabled
        """
        self._total_calls += 1
        func_name = getattr(func, "__name__", repr(func))

        for attempt in range(self.max_retries + 1):
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                if not self.retry_condition(e) or self.max_retries == 0:
                    raise

                if attempt >= self.max_retries:
                    logger.warning(
                        f"Max retries ({self.max_retries}) exceeded for {func_name}"
                    )
                    raise RetryExhaustedException(
                        f"Max retries ({self.max_retries}) exceeded. "
                        f"Last error: {type(e).__name__}: {e}",
                        last_exception=e,
                    ) from e

                delay = self._calculate_delay(attempt)
                logger.debug(
                    f"Retrying {func_name} in {delay:.2f}s "
                    f"(attempt {attempt + 1}/{self.max_retries + 1}). "
                    f"Error: {type(e).__name__}: {e}"
                )
                self._total_retries += 1
                self._sleep(delay)
            else:
                if attempt > 0:
                    logger.info(f"Function {func_name} succeeded after {attempt} retries")
                return result

    def get_retry_statistics(self) -> dict:
        """Return call and retry counters."""
        return {
            "total_calls": self._total_calls,
            "total_retries": self._total_retries,
        }
