"""
Structured error types for minutely.

Every failure the scheduler can surface falls into one of a few
categories, and each category stops at a fixed boundary:

    ┌──────────────────────────────────────────────────────────────┐
    │                       MinutelyError                          │
    │              (category, context, cause)                      │
    ├──────────────────────────────────────────────────────────────┤
    │  JobValidationError   VALIDATION   → 400 at the API boundary │
    │  JobNotFoundError     NOT_FOUND    → 404 at the API boundary │
    │  JobExecutionError    EXECUTION    → logged by dispatcher    │
    │  ConfigError          CONFIG       → raised at startup       │
    └──────────────────────────────────────────────────────────────┘

Execution errors never propagate into the scheduling loop; they exist
so worker outcomes can be described and logged uniformly.

Tags:
    error-handling, exception-hierarchy, minutely

Doc-Types:
    api-reference
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories used for routing and HTTP mapping."""

    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    EXECUTION = "EXECUTION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


class MinutelyError(Exception):
    """Base class for all minutely errors.

    Attributes:
        message: Human-readable description, safe to show to API clients.
        category: Classification used by the API error mapping.
        context: Extra metadata for logging (job id, field, exit code...).
        cause: The underlying exception, if any.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> MinutelyError:
        """Add context fields and return self for chaining."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


class JobValidationError(MinutelyError):
    """A job definition is malformed or out of range. Never mutates state."""

    default_category = ErrorCategory.VALIDATION


class JobNotFoundError(MinutelyError):
    """No job exists with the requested id."""

    default_category = ErrorCategory.NOT_FOUND

    def __init__(self, job_id: Any = None, message: str = "Job not found") -> None:
        super().__init__(message, context={"job_id": job_id} if job_id is not None else None)
        self.job_id = job_id


class JobExecutionError(MinutelyError):
    """A worker reported an error, crashed, or exited without signalling."""

    default_category = ErrorCategory.EXECUTION

    def __init__(
        self,
        job_id: int,
        message: str,
        *,
        exit_code: int | None = None,
    ) -> None:
        context: dict[str, Any] = {"job_id": job_id}
        if exit_code is not None:
            context["exit_code"] = exit_code
        super().__init__(message, context=context)
        self.job_id = job_id
        self.exit_code = exit_code


class ConfigError(MinutelyError):
    """Invalid configuration detected at startup."""

    default_category = ErrorCategory.CONFIG
