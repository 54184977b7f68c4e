"""API middleware components."""

from .context import RequestContextMiddleware
from .errors import ErrorHandlingMiddleware, request_validation_exception_handler
from .logging import RequestLoggingMiddleware

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestContextMiddleware",
    "RequestLoggingMiddleware",
    "request_validation_exception_handler",
]
