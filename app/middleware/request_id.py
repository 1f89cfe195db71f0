"""
Jojárts API — Request ID Middleware
=====================================

What:  Gives each request a short correlation id and returns it in the
       X-Request-ID response header.
How:   Reuses a client-sent X-Request-ID when present, otherwise generates
       one. The id lives in a ContextVar so loggers and exception handlers
       can read it without the Request object.

Error bodies only carry {"message": ...}, so the header is the one place
a client can find the id to quote in a bug report.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a request id and echoes it on the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Client ids are truncated; they end up in log lines
        client_rid = request.headers.get("X-Request-ID", "")[:MAX_CLIENT_ID_LENGTH]
        rid = client_rid or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
