"""
Natours Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions carrying an HTTP status code and an
       "operational vs. internal" classification.
How:   Every exception stores a user-facing message and an optional context dict.
       The central error handler (app/error_handlers.py) renders them; it trusts
       the message of operational errors and hides everything else in production.
Who:   Raised by services, repositories and auth dependencies; normalised by
       catch_async; rendered by the central error handler.

Exception Hierarchy:
    AppError (base)
    ├── ValidationError            → 400 (operational)
    │   └── DuplicateFieldError    → 400 (operational, unique constraint)
    ├── AuthenticationError        → 401 (operational)
    ├── AuthorizationError         → 403 (operational)
    ├── NotFoundError              → 404 (operational)
    └── InternalError              → 500 (NOT operational, carries the cause)
        ├── TokenSigningError      → 500
        └── DatabaseError          → 500

Operational errors are anticipated failures whose message is safe to show to
the client. Internal errors are programming or infrastructure faults: their
message never leaves the server in production.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Base exception for all Natours application errors.

    Attributes:
        message:        User-facing error description
        status_code:    HTTP status code used in the response
        is_operational: True when the message may be shown to the client
        context:        Additional debug info (logged, never returned in production)
    """

    status_code: int = 500
    is_operational: bool = True
    kind: str = "app_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context = context or {}
        super().__init__(self.message)

    @property
    def status(self) -> str:
        """Envelope status: "fail" for client errors, "error" for server errors."""
        return "fail" if 400 <= self.status_code < 500 else "error"

    def to_dict(self) -> Dict[str, Any]:
        """Raw error details, used only by the development error response."""
        return {
            "kind": self.kind,
            "type": type(self).__name__,
            "message": self.message,
            "statusCode": self.status_code,
            "status": self.status,
            "isOperational": self.is_operational,
            "context": self.context,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class ValidationError(AppError):
    """
    Raised when client input breaks a field constraint or business rule.

    When:  Missing login credentials, discount above price, malformed query values,
           request bodies rejected by the Pydantic models.
    HTTP:  400 Bad Request
    """

    status_code = 400
    kind = "validation_error"

    def __init__(
        self,
        message: str = "Invalid input data",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateFieldError(ValidationError):
    """
    Raised when an insert or update violates a unique constraint
    (duplicate user e-mail, duplicate tour name).
    """

    kind = "duplicate_field"

    def __init__(
        self,
        value: Optional[str] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if value:
            message = f"Duplicate field value: {value}. Please use another value!"
        elif field:
            message = f"Duplicate value for field '{field}'. Please use another value!"
        else:
            message = "Duplicate field value. Please use another value!"
        super().__init__(message=message, field=field, context=context)


class AuthenticationError(AppError):
    """
    Missing or invalid credentials or token.

    HTTP:  401 Unauthorized
    """

    status_code = 401
    kind = "authentication_error"

    def __init__(
        self,
        message: str = "You are not logged in! Please log in to get access.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(AppError):
    """
    Authenticated user lacks the role required by the route.

    HTTP:  403 Forbidden
    """

    status_code = 403
    kind = "authorization_error"

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(AppError):
    """
    Raised when a requested resource or route does not exist.

    Usage:
        NotFoundError(resource="tour", resource_id=str(tour_id))
            → "No tour found with that ID"
        NotFoundError(message="Can't find /nope on this server!")
            → message used verbatim (catch-all route)
    HTTP:  404 Not Found
    """

    status_code = 404
    kind = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(
            message=message or f"No {resource} found with that ID",
            context=ctx,
        )


class InternalError(AppError):
    """
    A non-operational failure: a bug, an unexpected exception, a broken dependency.

    The original exception is kept as `cause` so the development response and the
    server log can show it. Production responses replace the message with a
    generic one.
    HTTP:  500 Internal Server Error
    """

    status_code = 500
    is_operational = False
    kind = "internal_error"

    def __init__(
        self,
        message: str = "Something went very wrong!",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if cause is not None:
            ctx.setdefault("cause_type", type(cause).__name__)
        super().__init__(message=message, context=ctx)
        self.cause = cause

    @classmethod
    def from_exception(cls, exc: BaseException) -> "InternalError":
        """Wrap an arbitrary exception, keeping its text for server-side diagnostics."""
        return cls(message=str(exc) or type(exc).__name__, cause=exc)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.cause is not None:
            data["cause"] = repr(self.cause)
        return data


class TokenSigningError(InternalError):
    """
    The JWT could not be signed (missing or unusable secret, library failure).

    Surfaces as a 500; the signup or login that triggered it fails.
    """

    kind = "token_signing_error"

    def __init__(
        self,
        message: str = "Could not sign the authentication token",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)


class DatabaseError(InternalError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        Detailed error info (SQL, constraint names) is logged server-side only.
    """

    kind = "database_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, cause=cause, context=context)
