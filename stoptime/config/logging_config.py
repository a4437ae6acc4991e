"""Centralized logging configuration for the billing engine."""

import json
import logging
import logging.handlers
import os
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from stoptime.config.settings import StopTimeConfig

# Attributes every LogRecord carries; anything else came in via extra={}
# or a LogContext and is emitted as a structured field.
_RECORD_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "taskName",
    "exc_info",
    "exc_text",
    "stack_info",
}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string representation of log record
        """
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_FIELDS and not key.startswith("_"):
                log_data[key] = value

        # Context fields may hold Decimals and datetimes
        return json.dumps(log_data, default=str)


class LoggingConfig:
    """
    Configuration for centralized logging.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type ('standard' or 'json')
        log_file: Path to log file (optional)
        enable_console: Enable console output
        enable_file: Enable file output
        log_sql: Emit SQL statements from the storage layer
        max_file_size: Maximum log file size in bytes (default: 10MB)
        backup_count: Number of backup files to keep (default: 5)
    """

    VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    VALID_FORMATS = {"standard", "json"}

    def __init__(
        self,
        log_level: str = "INFO",
        log_format: str = "standard",
        log_file: Optional[str] = None,
        enable_console: bool = True,
        enable_file: bool = False,
        log_sql: bool = False,
        max_file_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
    ):
        """
        Initialize logging configuration.

        Raises:
            ValueError: If invalid log level or format, or file logging
                is enabled without a file
        """
        if log_level.upper() not in self.VALID_LEVELS:
            raise ValueError(
                f"Invalid log level: {log_level}. "
                f"Must be one of {', '.join(sorted(self.VALID_LEVELS))}"
            )

        if log_format not in self.VALID_FORMATS:
            raise ValueError(
                f"Invalid log format: {log_format}. "
                f"Must be one of {', '.join(sorted(self.VALID_FORMATS))}"
            )

        if enable_file and not log_file:
            raise ValueError("log_file must be specified when enable_file is True")

        self.log_level = log_level.upper()
        self.log_format = log_format
        self.log_file = log_file
        self.enable_console = enable_console
        self.enable_file = enable_file
        self.log_sql = log_sql
        self.max_file_size = max_file_size
        self.backup_count = backup_count

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """
        Create configuration from environment variables.

        Environment Variables:
            LOG_LEVEL: Log level (default: INFO)
            LOG_FORMAT: Log format (default: standard)
            LOG_FILE: Log file path (default: None)
            LOG_CONSOLE: Enable console output (default: true)
            LOG_FILE_ENABLED: Enable file output (default: false)
            LOG_SQL: Log SQL statements (default: false)

        Returns:
            LoggingConfig instance
        """
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
            log_file=os.getenv("LOG_FILE"),
            enable_console=os.getenv("LOG_CONSOLE", "true").lower() == "true",
            enable_file=os.getenv("LOG_FILE_ENABLED", "false").lower() == "true",
            log_sql=os.getenv("LOG_SQL", "false").lower() == "true",
        )

    @classmethod
    def from_settings(cls, settings: "StopTimeConfig") -> "LoggingConfig":
        """
        Create configuration from the application settings.

        The level comes from the settings; DEBUG forces debug level. Format
        and file output still come from the environment.

        Args:
            settings: Loaded application settings

        Returns:
            LoggingConfig instance
        """
        config = cls.from_env()
        config.log_level = "DEBUG" if settings.debug else settings.log_level
        return config


def configure_logging(config: LoggingConfig) -> None:
    """
    Configure logging for the application.

    Sets up handlers, formatters and levels on the root logger and keeps
    the SQLAlchemy engine logger quiet unless SQL logging is requested.

    Args:
        config: LoggingConfig instance
    """
    # Remove existing handlers to avoid duplicates
    reset_logging()
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.log_level))

    if config.log_format == "json":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    from stoptime.utils.logging_utils import _ContextFilter

    context_filter = _ContextFilter()

    if config.enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, config.log_level))
        console_handler.setFormatter(formatter)
        console_handler.addFilter(context_filter)
        root_logger.addHandler(console_handler)

    if config.enable_file and config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=config.log_file,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
        )
        file_handler.setLevel(getattr(logging, config.log_level))
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        root_logger.addHandler(file_handler)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if config.log_sql else logging.WARNING
    )


def reset_logging() -> None:
    """
    Reset logging configuration to defaults.

    Removes and closes all root handlers and resets the root logger level.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(logging.WARNING)
