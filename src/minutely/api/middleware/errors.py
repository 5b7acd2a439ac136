"""
Error-handling middleware - maps minutely errors to ``{"error": ...}`` responses.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from minutely.core.errors import ErrorCategory, MinutelyError
from minutely.core.logging import get_logger

logger = get_logger(__name__)

# ── Error category → HTTP status mapping ─────────────────────────────────

CATEGORY_TO_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.EXECUTION: 500,
    ErrorCategory.CONFIG: 500,
    ErrorCategory.INTERNAL: 500,
}


def status_for_category(category: ErrorCategory) -> int:
    """Resolve an error category to HTTP status, defaulting to 500."""
    return CATEGORY_TO_STATUS.get(category, 500)


def error_response(status: int, message: str) -> JSONResponse:
    """Build the JSON error envelope."""
    return JSONResponse(status_code=status, content={"error": message})


async def minutely_error_handler(request: Request, exc: MinutelyError) -> JSONResponse:
    status = status_for_category(exc.category)
    if status >= 500:
        logger.error("request_failed", path=request.url.path, **exc.to_dict())
    return error_response(status, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """A body that is not a JSON object is a validation error, not a 422."""
    logger.info("request_malformed", path=request.url.path, errors=len(exc.errors()))
    return error_response(400, "request body must be a JSON object")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions - returns 500."""
    logger.exception("request_unhandled_error", path=request.url.path, error=str(exc))
    detail = str(exc) if request.app.state.settings.debug else "An unexpected error occurred."
    return error_response(500, detail)
