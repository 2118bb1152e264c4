"""
SalesTrack Backend — Request ID Middleware
============================================

What:  Tags every request with a short correlation ID, echoed in X-Request-ID.
How:   A client-supplied X-Request-ID is honoured when it looks like an ID
       (letters, digits, dot, dash, underscore; at most 64 chars); anything
       else is replaced by a fresh one. The ID lives in a ContextVar shared by
       the access log and the error envelopes. It is not reset after the
       response: the catch-all 500 handler runs outside this middleware.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    """Eight hex chars: short enough for log lines, unique enough per process."""
    return uuid.uuid4().hex[:8]


def accept_request_id(candidate: str) -> str:
    """The client's ID if it is safe to log verbatim, else a new one."""
    if candidate and _VALID_REQUEST_ID.match(candidate):
        return candidate
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accept_request_id(request.headers.get(REQUEST_ID_HEADER, ""))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
