"""API middleware: request ids, timing, error mapping."""

from minutely.api.middleware.request_id import RequestIDMiddleware
from minutely.api.middleware.timing import TimingMiddleware

__all__ = ["RequestIDMiddleware", "TimingMiddleware"]
