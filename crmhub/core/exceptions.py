"""Error taxonomy shared by services and routers.

Every error carries the HTTP status it maps to and a short machine-readable
``code`` so clients can tell, say, "already marked in" apart from a generic
failure.
"""

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400
    code = "error"
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"
    default_message = "Invalid input"


class InvalidOrdering(ValidationError):
    code = "invalid_ordering"
    default_message = "Mark-out time must be after mark-in time"


class Unauthenticated(DomainError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Unauthorized"


class InvalidCredentials(Unauthenticated):
    code = "invalid_credentials"
    default_message = "Invalid email or password."


class AccountInactive(Unauthenticated):
    code = "account_inactive"
    default_message = "Account is inactive."


class Forbidden(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
    code = "forbidden"
    default_message = "Forbidden"


class NotFound(DomainError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class Conflict(DomainError):
    # Reported as 400 so clients branch on ``code`` rather than status
    code = "conflict"
    default_message = "Conflicting state"


class EmailAlreadyRegistered(Conflict):
    code = "email_taken"
    default_message = "Email already registered"


class AlreadyOpen(Conflict):
    code = "already_marked_in"
    default_message = "You are already marked in. Please mark out first."


class AlreadyMarkedToday(Conflict):
    code = "already_marked_today"
    default_message = "Attendance already marked for today"


class AlreadyClosed(Conflict):
    code = "already_marked_out"
    default_message = "Already marked out"


class InternalError(DomainError):
    status_code = 500
    code = "internal_error"
    default_message = "Internal server error"
