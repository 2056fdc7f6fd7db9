"""
SConf Backend - Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) map each type
       to an HTTP status code and a JSON error body.
Who:   Raised by the query shaper, the entity store and the services; caught
       by the handlers in main.register_exception_handlers.

Exception Hierarchy:
    SconfError (base)
    ├── ValidationError            → 400 Bad Request
    ├── NotFoundError              → 404 Not Found
    ├── ConstraintViolationError   → 400 Bad Request (FK / uniqueness conflict)
    └── DatabaseError              → 500 Internal Server Error

Store failures are tagged: only a genuinely missing row becomes
NotFoundError. Integrity failures become ConstraintViolationError and any
other storage failure becomes DatabaseError, so a broken database surfaces as
a 5xx rather than a misleading 404.
"""

from typing import Any, Dict, Optional


class SconfError(Exception):
    """
    Base exception for all SConf application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only returned for client errors)
    """

    code = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SconfError):
    """
    Raised when client input fails validation.

    When:  Malformed page/limit, page < 1, sortBy outside the allow-list,
           invalid sortOrder, non-integer id filter, invalid search pattern.
    HTTP:  400 Bad Request

    Example response:
        {
            "error": "Invalid sortBy 'password'. Allowed: id, fullName, ...",
            "code": "validation_error",
            "details": {"field": "sortBy", "allowed": [...]},
            "request_id": "a1b2c3d4"
        }
    """

    code = "validation_error"

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


class NotFoundError(SconfError):
    """
    Raised when a requested entity does not exist.

    When:  GET/PUT/DELETE /{resource}/{id} with an unknown id.
    HTTP:  404 Not Found, body {"error": "<Entity> not found", ...}
    """

    code = "not_found"

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConstraintViolationError(SconfError):
    """
    Raised when the store rejects a write because of a relational constraint.

    When:  Creating a participation that references a missing scientist or
           conference; deleting a scientist/conference still referenced by
           participations.
    HTTP:  400 Bad Request

    The storage engine does not reliably say which constraint failed, so the
    message stays generic ("check related records").
    """

    code = "constraint_violation"

    def __init__(
        self,
        message: str = "Operation violates a data constraint. Check related records.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SconfError):
    """
    Raised when a database operation fails for a reason other than absence or
    a constraint.

    HTTP:  500 Internal Server Error

    The response message is always generic; the original error type is kept
    in `context` and logged server-side only.
    """

    code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
