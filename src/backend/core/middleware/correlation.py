"""
Correlation ID middleware for request tracing.

Adds X-Correlation-ID to every response and exposes the current ID to log
records, so one request can be followed through app.log, auth.log and
devices.log.
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

CORRELATION_HEADER = "X-Correlation-ID"

# Context variable to store correlation ID for the current request
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Correlation ID of the current request, or "" outside a request."""
    return correlation_id_var.get("")


class CorrelationIdFilter(logging.Filter):
    """Attach `correlation_id` to every record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add correlation ID to requests and responses.

    - Reuses the caller's X-Correlation-ID or generates a new one
    - Stores it in a context variable for logs and services
    - Echoes it in the response headers
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        token = correlation_id_var.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response
