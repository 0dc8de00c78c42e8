"""
NoteHub Backend: Request ID Middleware
=======================================

What:  Gives each request a short correlation ID and echoes it back.
How:   Reuses an inbound X-Request-ID header or generates an 8-char UUID
       prefix, stores it in a ContextVar (for loggers and error handlers)
       and on request.state, and sets X-Request-ID on the response.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns and propagates X-Request-ID."""

    HEADER = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(self.HEADER) or new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[self.HEADER] = rid
        return response
