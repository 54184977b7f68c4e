"""Request context middleware for propagating context through the request lifecycle."""

import re
from typing import Callable
from uuid import UUID

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from uuid_utils.compat import uuid7

from vitrine.core.context import create_context, request_context

# Paths that don't require request context
SKIP_CONTEXT_PATHS = {
    "/health",
    "/health/db",
    "/docs",
    "/redoc",
    "/openapi.json",
}

_EXHIBIT_PATH = re.compile(r"^/v1/exhibits/(?P<slug>[^/]+)")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware that sets up RequestContext for each request.

    Sets:
        request.state.request_id: The generated request ID (UUIDv7)
        request.state.exhibit_slug: The exhibit named in the path, if any
        X-Request-ID / X-Correlation-ID response headers
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request within a RequestContext."""
        request_id = uuid7()
        request.state.request_id = request_id

        if self._should_skip_context(request.url.path):
            response = await call_next(request)
            response.headers["X-Request-ID"] = str(request_id)
            return response

        exhibit_slug = self._get_exhibit_slug(request.url.path)
        request.state.exhibit_slug = exhibit_slug

        ctx = create_context(
            exhibit_slug=exhibit_slug,
            request_id=request_id,
            correlation_id=self._get_correlation_id(request),
        )

        with request_context(ctx):
            response = await call_next(request)

        response.headers["X-Request-ID"] = str(request_id)
        response.headers["X-Correlation-ID"] = str(ctx.correlation_id)
        return response

    def _should_skip_context(self, path: str) -> bool:
        return path in SKIP_CONTEXT_PATHS or path.startswith(("/docs", "/redoc"))

    def _get_exhibit_slug(self, path: str) -> str | None:
        match = _EXHIBIT_PATH.match(path)
        return match.group("slug").lower() if match else None

    def _get_correlation_id(self, request: Request) -> UUID | None:
        """Reuse a caller-supplied correlation ID when it is a valid UUID."""
        value = request.headers.get("X-Correlation-ID")
        if not value:
            return None
        try:
            return UUID(value)
        except ValueError:
            return None
