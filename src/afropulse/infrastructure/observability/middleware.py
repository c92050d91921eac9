"""Middleware for observability: request/response logging."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from afropulse.infrastructure.observability.logging import (
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)


# Hey future me, this runs BEFORE every route. It sets the correlation ID (from the
# X-Correlation-ID header, or a fresh UUID) so all adapter logs of one aggregation run
# share it, then echoes it back in the response header.
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        set_correlation_id(request.headers.get("X-Correlation-ID"))

        method = request.method
        path = request.url.path
        logger.info(
            "→ %s %s",
            method,
            path,
            extra={"method": method, "path": path, "query_params": str(request.query_params)},
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed: %s %s",
                method,
                path,
                extra={"method": method, "path": path, "error_type": type(e).__name__},
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        status_mark = "✓" if response.status_code < 400 else "✗"
        logger.info(
            "%s %s %s → %d (%.0fms)",
            status_mark,
            method,
            path,
            response.status_code,
            duration_ms,
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": int(duration_ms),
            },
        )
        response.headers["X-Correlation-ID"] = get_correlation_id()
        return response
