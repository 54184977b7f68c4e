"""Error handling middleware for mapping exceptions to HTTP responses."""

from datetime import UTC, datetime
from typing import Any, Callable
from uuid import UUID

import structlog
from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm.exc import StaleDataError
from starlette.middleware.base import BaseHTTPMiddleware

from vitrine.api.schemas.errors import APIError, ErrorCode
from vitrine.core.exceptions import (
    ConflictError,
    ContextNotSetError,
    NotFoundError,
    UpstreamUnavailableError,
    ValidationFailedError,
    field_errors_from_pydantic,
)

logger = structlog.get_logger()

# Leading location segments FastAPI adds that callers never see
_REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def _error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict | None,
) -> JSONResponse:
    request_id = _get_request_id(request)
    error = APIError(
        error_code=error_code,
        message=message,
        details=details,
        request_id=request_id,
        timestamp=datetime.now(UTC),
    )
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(mode="json"),
        headers={"X-Request-ID": request_id},
    )


def _get_request_id(request: Request) -> str:
    """Extract request ID from state or generate placeholder."""
    if hasattr(request.state, "request_id"):
        rid = request.state.request_id
        return str(rid) if isinstance(rid, UUID) else rid
    return "unknown"


def _request_field_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    result = []
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in _REQUEST_LOCATIONS:
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) or "__root__"
        result.append({"field": field, "message": err.get("msg", "Invalid value")})
    return result


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI request validation failures in the standard error body."""
    return _error_response(
        request,
        422,
        ErrorCode.VALIDATION_FAILED.value,
        "Request validation failed",
        {"errors": _request_field_errors(list(exc.errors()))},
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware that catches exceptions and returns standardized error responses.

    Maps domain exceptions to appropriate HTTP status codes and formats
    all errors using the APIError schema.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and handle any exceptions."""
        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle_exception(request, exc)

    def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """Convert exception to JSON error response."""
        status_code, error_code, message, details = self._map_exception(request, exc)
        if status_code >= 500:
            logger.error(
                "request_failed",
                error_code=error_code,
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=status_code == 500,
            )
        return _error_response(request, status_code, error_code, message, details)

    def _map_exception(
        self, request: Request, exc: Exception
    ) -> tuple[int, str, str, dict | None]:
        """Map exception to (status_code, error_code, message, details)."""
        if isinstance(exc, ValidationFailedError):
            return (
                422,
                ErrorCode.VALIDATION_FAILED.value,
                exc.args[0],
                exc.details(),
            )

        if isinstance(exc, NotFoundError):
            return (
                404,
                ErrorCode.NOT_FOUND.value,
                exc.args[0],
                exc.details(),
            )

        if isinstance(exc, ConflictError):
            return (
                409,
                ErrorCode.CONFLICT.value,
                exc.args[0],
                exc.details(),
            )

        if isinstance(exc, StaleDataError):
            return (
                409,
                ErrorCode.CONFLICT.value,
                "Concurrent modification detected",
                None,
            )

        if isinstance(exc, UpstreamUnavailableError):
            return (
                504 if exc.timed_out else 502,
                ErrorCode.UPSTREAM_UNAVAILABLE.value,
                exc.args[0],
                exc.details(),
            )

        # Validation errors (Pydantic) raised outside request parsing
        if isinstance(exc, ValidationError):
            return (
                422,
                ErrorCode.VALIDATION_FAILED.value,
                "Validation failed",
                {"errors": [e.to_dict() for e in field_errors_from_pydantic(exc)]},
            )

        # Context errors (internal)
        if isinstance(exc, ContextNotSetError):
            return (
                500,
                ErrorCode.INTERNAL_ERROR.value,
                "Internal server error: context not initialized",
                None,
            )

        # Generic exceptions
        return (
            500,
            ErrorCode.INTERNAL_ERROR.value,
            "Internal server error",
            {"type": type(exc).__name__} if self._is_debug(request) else None,
        )

    def _is_debug(self, request: Request) -> bool:
        """Check if debug mode is enabled for this app."""
        settings = getattr(request.app.state, "settings", None)
        return bool(settings is not None and settings.DEBUG)
