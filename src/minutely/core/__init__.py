"""Core primitives shared by every minutely layer."""

from minutely.core.errors import (
    ConfigError,
    ErrorCategory,
    JobExecutionError,
    JobNotFoundError,
    JobValidationError,
    MinutelyError,
)
from minutely.core.logging import configure_logging, get_logger

__all__ = [
    "ErrorCategory",
    "MinutelyError",
    "JobValidationError",
    "JobNotFoundError",
    "JobExecutionError",
    "ConfigError",
    "configure_logging",
    "get_logger",
]
