"""
Natours Backend — Central Error Handler
=========================================

What:  The one place that turns exceptions into HTTP error responses.
How:   register_exception_handlers(app, settings) installs FastAPI exception
       handlers. The response branch is chosen once, from the injected settings.
Who:   Called by create_app().

Response shapes:
    development (any error):
        {"status", "error": {...raw details...}, "message", "stack": [...]}
    production, operational error:
        {"status", "message"}                       with the error's status code
    production, non-operational error:
        {"status": "error", "message": "Something went very wrong!"}   500

    status is "fail" for 4xx and "error" for 5xx.

Framework errors are converted before rendering:
    RequestValidationError   → ValidationError (400, not FastAPI's 422)
    StarletteHTTPException   → AppError with the same status code
    any other Exception      → InternalError (non-operational)
"""

import logging
import traceback
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings
from app.exceptions import AppError, InternalError, ValidationError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Something went very wrong!"

_VALUE_ERROR_PREFIX = "Value error, "


def _stack(exc: BaseException) -> List[str]:
    return traceback.format_exception(type(exc), exc, exc.__traceback__)


def validation_error_from(exc: RequestValidationError) -> ValidationError:
    """
    Collapse pydantic errors into one message:
        "Invalid input data. email: Field required. Passwords are not the same!"
    Messages raised by our own validators are used as-is; built-in ones are
    prefixed with the offending field.
    """
    parts = []
    for error in exc.errors():
        msg = str(error.get("msg", "Invalid value"))
        if msg.startswith(_VALUE_ERROR_PREFIX):
            parts.append(msg[len(_VALUE_ERROR_PREFIX):])
            continue
        location = [str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path")]
        parts.append(f"{'.'.join(location)}: {msg}" if location else msg)
    message = "Invalid input data. " + ". ".join(parts) if parts else "Invalid input data"
    return ValidationError(message=message, context={"errors": len(parts)})


def _log(request: Request, err: AppError) -> None:
    rid = request_id_var.get("")
    if err.is_operational:
        logger.warning(
            "[%s] %s %s → %d %s",
            rid, request.method, request.url.path, err.status_code, err.message,
        )
    else:
        logger.error(
            "[%s] %s %s → %d %r | Context: %s",
            rid, request.method, request.url.path, err.status_code, err, err.context,
            exc_info=(type(err), err, err.__traceback__),
        )


def render_error(err: AppError, settings: Settings) -> JSONResponse:
    """Build the response body for `err` according to the environment."""
    if settings.is_development:
        content: Dict[str, Any] = {
            "status": err.status,
            "error": err.to_dict(),
            "message": err.message,
            "stack": _stack(err),
        }
        return JSONResponse(status_code=err.status_code, content=content)

    if err.is_operational:
        return JSONResponse(
            status_code=err.status_code,
            content={"status": err.status, "message": err.message},
        )

    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": GENERIC_MESSAGE},
    )


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """
    Register the central handlers on `app`.

    Every handler converts its exception into an AppError, logs it, and
    delegates to render_error().
    """

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        _log(request, exc)
        return render_error(exc, settings)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        err = validation_error_from(exc)
        _log(request, err)
        return render_error(err, settings)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        err = AppError(message=str(exc.detail), status_code=exc.status_code)
        err.is_operational = exc.status_code < 500
        _log(request, err)
        response = render_error(err, settings)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Last resort for errors raised outside catch_async (middleware, commit)."""
        err = InternalError.from_exception(exc)
        err.__traceback__ = exc.__traceback__
        _log(request, err)
        return render_error(err, settings)
