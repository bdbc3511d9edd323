"""
Employee Dashboard Backend — Request ID Middleware
===================================================

What:  Assigns a short correlation ID to each request and echoes it back.
Why:   Ties together the access log line, any service log lines and the
       `request_id` field of an error envelope for the same request.
How:   Uses the client's X-Request-ID when present, otherwise a fresh
       8-character UUID prefix; stored in a ContextVar and response header.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique ID to each request for tracing.

    Behavior:
        1. Reuse X-Request-ID from the client (the UI may generate one)
        2. Otherwise generate a new short UUID
        3. Store in ContextVar and request.state
        4. Add to response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
