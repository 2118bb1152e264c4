"""
SalesTrack Backend — Access Log Middleware
============================================

What:  One line per request on the "salestrack.access" logger.
How:   Status decides the level (5xx ERROR, 4xx WARNING, otherwise INFO).
       POST/PUT/PATCH/DELETE requests are tagged "write" (owner mutations end
       in a whole-document store round-trip; login and sync are POSTs that
       only read), everything else "read". An exception escaping the app is
       logged with its duration and re-raised for the 500 handler.

Request bodies are never logged: login requests carry seller secrets.
"""

import logging
import time
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from salestrack.middleware.request_id import request_id_var

logger = logging.getLogger("salestrack.access")

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Args:
        quiet_paths: Paths never logged (probes hit /health every few seconds).
    """

    def __init__(self, app: ASGIApp, quiet_paths: Iterable[str] = ("/health",)):
        super().__init__(app)
        self.quiet_paths = frozenset(quiet_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.quiet_paths:
            return await call_next(request)

        started = time.perf_counter()
        kind = "write" if request.method in WRITE_METHODS else "read"
        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": path,
            "kind": kind,
            "client_ip": request.client.host if request.client else "unknown",
        }

        try:
            response = await call_next(request)
        except Exception:
            fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            logger.error(
                "%s %s raised after %.1fms [%s]",
                fields["method"],
                path,
                fields["duration_ms"],
                fields["request_id"],
                extra=fields,
            )
            raise

        fields["status"] = response.status_code
        fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms %s [%s] from %s",
            fields["method"],
            path,
            response.status_code,
            fields["duration_ms"],
            kind,
            fields["request_id"],
            fields["client_ip"],
            extra=fields,
        )
        return response
