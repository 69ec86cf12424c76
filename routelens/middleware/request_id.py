"""
RouteLens — Request ID Middleware
==================================

What:  Correlates one editor action with every log line it causes.
How:   The editor plugin tags each call (annotation fetch, activation, save)
       with an X-Request-ID so its own output channel and our stderr log can
       be matched up. Calls without one get a generated 8-character ID.
When:  First middleware in the chain; the access log and the exception
       handlers in main.py read the ID from `request_id_var`.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Plugin-supplied IDs end up verbatim in log lines
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(header_value: str) -> str:
    """Plugin ID when it is a short token, otherwise a fresh one."""
    candidate = header_value.strip()
    if _SAFE_REQUEST_ID.match(candidate):
        return candidate
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets `request_id_var` for the request and echoes the ID back to the plugin."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER, ""))
        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
