"""
Error classification for the billing services.

Separates failures a retry can fix (an invoice number taken by a concurrent
writer, a locked SQLite database) from failures it cannot (validation and
reference errors).
"""

import logging
from enum import Enum
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from stoptime.errors import BillingError, ConcurrencyConflict

logger = logging.getLogger(__name__)

# Fragments of driver messages that indicate a transient lock
_TRANSIENT_MESSAGES = (
    "database is locked",
    "database table is locked",
    "deadlock detected",
    "could not serialize access",
)


class ErrorType(Enum):
    """Classification of error types."""

    RETRYABLE = "retryable"  # Conflicting writers, transient locks
    FATAL = "fatal"  # Invalid input, broken references, constraint violations
    UNKNOWN = "unknown"


class ErrorClassifier:
    """
    Classifies errors to distinguish between retryable and fatal errors.

    Example:
        >>> classifier = ErrorClassifier()
        >>> classifier.is_retryable(ConcurrencyConflict("number taken"))
        True
    """

    def classify(self, exception: Exception) -> ErrorType:
        """
        Classify an exception into retryable, fatal, or unknown.

        Args:
            exception: The exception to classify

        Returns:
            ErrorType classification
        """
        if isinstance(exception, ConcurrencyConflict):
            return ErrorType.RETRYABLE

        if isinstance(exception, BillingError):
            return ErrorType.FATAL

        if isinstance(exception, OperationalError):
            message = str(exception.orig or exception).lower()
            if any(fragment in message for fragment in _TRANSIENT_MESSAGES):
                return ErrorType.RETRYABLE
            return ErrorType.FATAL

        # Constraint violations that were not translated into a conflict
        if isinstance(exception, (IntegrityError, DBAPIError)):
            return ErrorType.FATAL

        logger.debug(f"Unclassified error: {type(exception).__name__}")
        return ErrorType.UNKNOWN

    def is_retryable(self, exception: Exception) -> bool:
        """
        Check if an exception should be retried.

        Args:
            exception: The exception to check

        Returns:
            True if retryable, False otherwise
        """
        return self.classify(exception) == ErrorType.RETRYABLE
