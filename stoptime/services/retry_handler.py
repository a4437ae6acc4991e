"""
Retry handler with exponential backoff and jitter.

Used around invoice creation: when two writers race for the same invoice
number, the loser rolls back and retries with a freshly computed number.
"""

import logging
import random
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class RetryExhaustedException(Exception):
    """Raised when all retry attempts have been exhausted."""

    def __init__(self, message: str, last_exception: Optional[Exception] = None):
        super().__init__(message)
        self.last_exception = last_exception


class RetryHandler:
    """
    Re-runs a callable on retryable failures with exponential backoff.

    The callable must be safe to repeat: every attempt starts from a clean
    transaction. Whether a failure is retryable is decided by
    ``retry_condition``, by default the ErrorClassifier.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 0.1,
        max_delay: float = 5.0,
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
            retry_condition: Decides whether an exception is worth retrying
            sleep: Function used to wait between attempts
        """
        if max_retries < 0:
            raise ValueError("max_retries cannot be negative")

        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter_factor = jitter_factor
        self.retry_condition = retry_condition or self._default_retry_condition
        self._sleep = sleep

    @staticmethod
    def _default_retry_condition(exception: Exception) -> bool:
        from stoptime.services.error_classifier import ErrorClassifier

        return ErrorClassifier().is_retryable(exception)

    def _calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay for exponential backoff with jitter.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        jitter = random.uniform(-self.jitter_factor, self.jitter_factor) * delay
        return max(0, delay + jitter)

    def execute_with_retry(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute function with retry logic.

        Args:
            func: Function to execute
            *args: Positional arguments for function
            **kwargs: Keyword arguments for function

        Returns:
            Result of function execution

        Raises:
            RetryExhaustedException: If all retries are exhausted
            Exception: Original exception if not retryable
        """
        func_name = getattr(func, "__name__", repr(func))

        for attempt in range(self.max_retries + 1):  # +1 for initial attempt
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                if not self.retry_condition(e):
                    logger.debug(f"Not retrying - condition not met: {type(e).__name__}")
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
                logger.info(
                    f"Retrying {func_name} in {delay:.2f}s "
                    f"(attempt {attempt + 1}/{self.max_retries + 1}). "
                    f"Error: {type(e).__name__}: {e}"
                )
                self._sleep(delay)
                continue

            if attempt > 0:
                logger.info(f"Function {func_name} succeeded after {attempt} retries")
            return result

