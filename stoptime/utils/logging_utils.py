"""Structured logging utilities with context support."""

import functools
import logging
import threading
import uuid
from typing import Any, Callable, Dict, Optional, cast

# Thread-local storage for log context
_thread_local = threading.local()

# Field names whose values never reach the logs: bank account details
# from the company profile and credentials.
SENSITIVE_FIELDS = {
    "accountno",
    "iban",
    "bic",
    "password",
    "token",
    "secret",
    "database_url",
}


def generate_correlation_id() -> str:
    """
    Generate a unique correlation ID for tracking one operation.

    Returns:
        UUID string to use as correlation ID
    """
    return str(uuid.uuid4())


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields currently attached to log records."""
    return dict(getattr(_thread_local, "context", {}))


class LogContext:
    """
    Context manager for adding structured fields to log records.

    Fields are stored in thread-local storage and copied onto every record
    emitted inside the block by the filter installed in configure_logging.
    Nested contexts merge; leaving a block restores the outer fields.

    Example:
        with LogContext(customer_id=3, invoice_number=202401):
            logger.info("Cloning billed tasks")
    """

    def __init__(self, **kwargs):
        self.fields = kwargs
        self.previous_context: Optional[Dict[str, Any]] = None

    def __enter__(self):
        if not hasattr(_thread_local, "context"):
            _thread_local.context = {}

        self.previous_context = _thread_local.context.copy()
        _thread_local.context.update(self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.previous_context is not None:
            _thread_local.context = self.previous_context
        else:
            _thread_local.context = {}


class _ContextFilter(logging.Filter):
    """Logging filter that adds context fields to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in get_log_context().items():
            setattr(record, key, value)
        return True


def sanitize_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact sensitive values in a dictionary before it is logged.

    Nested dictionaries are processed recursively. Keys match when they
    contain any of SENSITIVE_FIELDS, case-insensitively.

    Args:
        data: Dictionary to sanitize

    Returns:
        Sanitized copy with sensitive values replaced by ``***REDACTED***``
    """
    if not isinstance(data, dict):
        return data

    sanitized: Dict[str, Any] = {}

    for key, value in data.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
            sanitized[key] = "***REDACTED***" if value is not None else None
        elif isinstance(value, dict):
            sanitized[key] = sanitize_sensitive_data(cast(Dict[str, Any], value))
        else:
            sanitized[key] = value

    return sanitized


def log_function_call(
    func: Optional[Callable] = None, *, include_args: bool = False, level: str = "DEBUG"
) -> Callable:
    """
    Decorator to log function entry and exit.

    Exceptions are logged with their traceback and re-raised.

    Args:
        func: Function to decorate (when used without arguments)
        include_args: Whether to include function arguments in logs
        level: Log level to use (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Decorated function

    Example:
        @log_function_call
        def mark_invoice_paid(session_factory, number):
            ...

        @log_function_call(include_args=True, level="INFO")
        def build(self, selection):
            ...
    """

    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(f.__module__)
            log_level = getattr(logging, level.upper())

            if include_args:
                args_repr = [repr(a) for a in args]
                kwargs_repr = [f"{k}={v!r}" for k, v in kwargs.items()]
                signature = ", ".join(args_repr + kwargs_repr)
                logger.log(log_level, f"Entering {f.__name__} with args: {signature}")
            else:
                logger.log(log_level, f"Entering {f.__name__}")

            try:
                result = f(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Exception in {f.__name__}: {type(e).__name__}: {e}",
                    exc_info=True,
                )
                raise

            logger.log(log_level, f"Exiting {f.__name__}")
            return result

        return wrapper

    # Supports both @log_function_call and @log_function_call(...)
    if func is None:
        return decorator
    return decorator(func)
