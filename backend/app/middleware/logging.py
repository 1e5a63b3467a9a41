"""
Natours Backend — Development Access Log
==========================================

What:  One compact line per request in the style of a dev access logger:

           GET /api/v1/tours?difficulty=easy 200 4.2 ms - 1893 [a1b2c3d4] user=<uuid>

When:  Mounted by create_app() only when ENVIRONMENT=development.

The query string is logged, bodies and the Authorization header are not. The
user id (request.state.user_id) appears once protect has authenticated the
request.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("natours.access")

SKIP_PATHS = frozenset({"/health", "/favicon.ico"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _authenticated_user(request: Request) -> Optional[str]:
    # The ORM user is detached by now; only the string id set by protect is safe
    return getattr(request.state, "user_id", None)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIP_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        size = response.headers.get("content-length", "-")
        user_id = _authenticated_user(request)

        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1f ms - %s [%s]%s",
            request.method,
            target,
            response.status_code,
            elapsed_ms,
            size,
            request_id_var.get(""),
            f" user={user_id}" if user_id else "",
        )
        return response
