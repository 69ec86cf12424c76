"""
RouteLens — Request Logging Middleware
=======================================

What:  One log line per HTTP request with method, path, status and duration.
How:   Measures time around the downstream handler and picks the log level
       from the response status.
When:  After RequestIDMiddleware (uses request ID for correlation).

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, request ID
    ❌ Don't log: request bodies (they carry full source files)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from routelens.middleware.request_id import request_id_var

logger = logging.getLogger("routelens.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Typical durations:
        - POST /api/annotations (cached): 1-3ms
        - POST /api/annotations (miss):   5-50ms (dump read + view lookups)
        - POST /api/routes/regenerate:    1-10s (`rails routes` boots the app)
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        # Health probes from the plugin's status bar run every few seconds
        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s]",
            method,
            path,
            status,
            duration_ms,
            rid,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )

        return response
