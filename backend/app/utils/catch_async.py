"""
Natours Backend — Async Controller Wrapper
============================================

What:  Decorator applied to every async route handler and to the async auth
       dependency. Whatever the wrapped coroutine raises leaves it as an AppError,
       so the central error handler is the single place that builds error responses.
How:   functools.wraps keeps the original signature visible to FastAPI's
       dependency injection (inspect.signature follows __wrapped__).

Translation rules:
    AppError                     → re-raised unchanged
    sqlalchemy IntegrityError    → DuplicateFieldError / ValidationError (operational)
    other SQLAlchemyError        → DatabaseError (non-operational)
    anything else                → InternalError (non-operational, keeps the cause)
"""

import functools
import re
from typing import Any, Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.exceptions import (
    AppError,
    DatabaseError,
    DuplicateFieldError,
    InternalError,
    ValidationError,
)

T = TypeVar("T")

# PostgreSQL: Key (email)=(jane@example.com) already exists.
_PG_DUPLICATE = re.compile(r"Key \((?P<field>[^)]+)\)=\((?P<value>.*?)\) already exists")
# SQLite: UNIQUE constraint failed: users.email
_SQLITE_DUPLICATE = re.compile(r"UNIQUE constraint failed: \w+\.(?P<field>\w+)")


def _translate_integrity_error(exc: IntegrityError) -> AppError:
    text = str(exc.orig) if exc.orig is not None else str(exc)

    match = _PG_DUPLICATE.search(text)
    if match:
        return DuplicateFieldError(value=match.group("value"), field=match.group("field"))

    match = _SQLITE_DUPLICATE.search(text)
    if match or "duplicate key" in text.lower():
        field: Optional[str] = match.group("field") if match else None
        return DuplicateFieldError(field=field)

    return ValidationError(
        message="Invalid input data",
        context={"constraint_error": type(exc.orig).__name__ if exc.orig else "IntegrityError"},
    )


def translate_exception(exc: BaseException) -> AppError:
    """Map any exception onto the application error hierarchy."""
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, IntegrityError):
        return _translate_integrity_error(exc)
    if isinstance(exc, SQLAlchemyError):
        return DatabaseError(cause=exc)
    return InternalError.from_exception(exc)


def catch_async(handler: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """
    Funnel every failure of an async handler into the central error pipeline.

    Usage:
        @router.get("/tours")
        @catch_async
        async def get_all_tours(...): ...
    """

    @functools.wraps(handler)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await handler(*args, **kwargs)
        except AppError:
            raise
        except Exception as exc:
            raise translate_exception(exc) from exc

    return wrapper
