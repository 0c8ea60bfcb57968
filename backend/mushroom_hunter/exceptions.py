"""
Mushroom Hunter Backend — Custom Exception Hierarchy
======================================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by services, dependencies and helpers; caught by global handlers.

Exception Hierarchy:
    MushroomHunterError (base)
    ├── ValidationError          → 400 Bad Request
    ├── InvalidReferenceError    → 400 Bad Request (dangling foreign key)
    ├── AuthenticationError      → 401 Unauthorized
    ├── AuthorizationError       → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class MushroomHunterError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (returned as `details` only where the
                  handler chooses to)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = dict(context or {})
        super().__init__(self.message)


class ValidationError(MushroomHunterError):
    """
    Raised when client input fails a business rule.

    Schema-level validation (types, ranges) is handled by FastAPI and
    returns 422; this exception covers rules that need the database, such
    as "user already exists".
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidReferenceError(ValidationError):
    """Raised when a payload points at a parent record that does not exist."""

    error_code = "invalid_reference"

    def __init__(
        self,
        resource: str,
        resource_id: Optional[str] = None,
        field: Optional[str] = None,
    ):
        message = f"Invalid reference to {resource}"
        if resource_id:
            message = f"Invalid reference: {resource} with ID '{resource_id}' does not exist"
        super().__init__(message=message, field=field, context={"resource": resource})


class AuthenticationError(MushroomHunterError):
    """
    Raised when the caller is not (or no longer) authenticated.

    `code` is a machine-readable reason the client can branch on, e.g.
    `token_expired` tells the web client to send the user back to login.
    """

    status_code = 401
    error_code = "authentication_error"

    def __init__(
        self,
        message: str = "Authentication required",
        code: str = "authentication_required",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        ctx["code"] = code
        super().__init__(message=message, context=ctx)
        self.code = code


class AuthorizationError(MushroomHunterError):
    """Raised when an authenticated caller may not touch a resource."""

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Access denied",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MushroomHunterError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    this exception so the handler can answer 404.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = dict(context or {})
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(MushroomHunterError):
    """Raised on unique-constraint clashes and on deleting referenced rows."""

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(MushroomHunterError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; details are
    logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
