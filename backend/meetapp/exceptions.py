"""
Meetapp Backend: Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception carries a user-safe message and an optional context
       dict. Global exception handlers (registered in main.py) translate them
       into structured JSON error responses with the right HTTP status code.
Who:   Raised by services, dependencies and middleware; caught by handlers.

Exception Hierarchy:
    MeetappError (base)
    ├── ValidationError             → 400 Bad Request
    ├── AuthenticationError         → 401 Unauthorized
    ├── PermissionDeniedError       → 403 Forbidden
    ├── NotFoundError               → 404 Not Found
    ├── SubscriptionRejectedError   → 400 / 409 (per ConflictReason)
    ├── FileStorageError            → 500 Internal Server Error
    ├── DatabaseError               → 500 Internal Server Error
    └── JobError                    (background jobs only, never reaches HTTP)
"""

from typing import Any, Dict, Optional


class MeetappError(Exception):
    """
    Base exception for all Meetapp application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where noted)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MeetappError):
    """
    Raised when client input breaks a business rule.

    When:    Past meetup date, duplicate e-mail, unsupported upload type,
             editing a past meetup.
    HTTP:    400 Bad Request. Schema-level problems stay with FastAPI's 422.
    """

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


class AuthenticationError(MeetappError):
    """
    Raised when the caller cannot be identified.

    When:    Missing/invalid/expired token, wrong credentials, wrong old password.
    HTTP:    401 Unauthorized with `WWW-Authenticate: Bearer`.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(MeetappError):
    """
    Raised when an authenticated user acts on a resource they do not own.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MeetappError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that into
    this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class SubscriptionRejectedError(MeetappError):
    """
    Raised when the subscription validator refuses a new subscription.

    Attributes:
        reason: The ConflictReason value (self_subscription, meetup_past,
                time_conflict). NotFound is reported as NotFoundError instead.
    """

    MESSAGES = {
        "self_subscription": "You cannot subscribe to your own meetups",
        "meetup_past": "You cannot subscribe to meetups that already happened",
        "time_conflict": "You are already subscribed to a meetup at the same time",
    }

    def __init__(
        self,
        reason: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(
            message=self.MESSAGES.get(reason, "Subscription rejected"),
            context=ctx,
        )
        self.reason = reason


class FileStorageError(MeetappError):
    """
    Raised when file system operations fail (disk full, permission denied).

    HTTP:    500 Internal Server Error. File paths stay in the server logs.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(MeetappError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error. The client always gets a generic
             message; the SQL error is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class JobError(MeetappError):
    """
    Raised by a background job.

    When:    A job handler fails (e.g. SMTP delivery). Never mapped to an
             HTTP response; the job logs it after the last retry.
    """

    def __init__(
        self,
        message: str = "Background job failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
