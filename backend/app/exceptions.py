"""
Employee Dashboard Backend — Custom Exception Hierarchy
========================================================

What:  Application-specific exceptions, each tagged with its HTTP status.
Why:   Services raise typed errors; a single handler in main.py renders them
       into the standard error envelope. No route has its own try/except.
How:   Each exception carries a user-facing message, a status code and an
       optional context dict that is logged but never returned to the client.

Exception Hierarchy:
    EmployeeDashboardError (base, 500)
    ├── ValidationError          → 400 Bad Request
    ├── AlreadyDeletedError      → 400 Bad Request (row already inactive)
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict (duplicate email)
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class EmployeeDashboardError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        status_code:  HTTP status the global handler responds with
        error_code:   Machine-readable tag used in log lines
        context:      Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(EmployeeDashboardError):
    """
    Raised when client input fails validation.

    When:    Missing name/email on create, nothing to update, malformed body.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AlreadyDeletedError(EmployeeDashboardError):
    """
    Raised when deleting a row that is already inactive.

    Distinct from NotFoundError: the id exists, it has simply been
    soft-deleted before.
    """

    status_code = 400
    error_code = "already_deleted"

    def __init__(
        self,
        resource: str = "Employee",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=f"{resource} already deleted", context=context)


class AuthenticationError(EmployeeDashboardError):
    """
    Raised when the bearer-token gate rejects a request.

    `reason` is one of "missing header", "invalid format", "invalid token".
    It is kept for logging; the caller only sees the message.
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Unauthorized",
        reason: str = "invalid token",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(message=message, context=ctx)
        self.reason = reason


class NotFoundError(EmployeeDashboardError):
    """
    Raised when a requested resource does not exist.

    For employees this also covers soft-deleted rows: an inactive id is
    indistinguishable from one that never existed.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "Employee",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class ConflictError(EmployeeDashboardError):
    """
    Raised when a write would violate a uniqueness rule.

    When:    Create/update with an email already held by another row, either
             caught by the service pre-check or by the store's unique constraint.
    HTTP:    409 Conflict
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Email already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(EmployeeDashboardError):
    """
    Raised when database operations fail unexpectedly.

    What:    Connection lost mid-query, deadlock, driver failure, etc.
    HTTP:    500 Internal Server Error

    The handler never returns this message's context; SQL text and driver
    details stay in the server log.
    """

    status_code = 500
    error_code = "database_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
