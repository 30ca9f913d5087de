# File: app/core/exceptions.py
from typing import Dict, Optional


class MembershipError(Exception):
    """Base for domain errors raised by the crud and service layers."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, internal: Optional[str] = None):
        self.message = message or self.default_message
        # Only rendered to clients outside production
        self.internal = internal
        super().__init__(self.message)


class ValidationError(MembershipError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, *, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}


class NotFoundError(MembershipError):
    status_code = 404
    default_message = "Not found"


class ConflictError(MembershipError):
    status_code = 409
    default_message = "Record already exists"


class InvalidStateError(MembershipError):
    status_code = 409
    default_message = "Invalid status transition"


class InvalidTokenError(MembershipError):
    status_code = 400
    default_message = "Invalid or expired reset token. Please request a new password reset."


class AuthenticationError(MembershipError):
    status_code = 401
    default_message = "Invalid email or password"


class AccountDisabledError(MembershipError):
    status_code = 403
    default_message = "Account is inactive. Please contact support."


class AllocationError(MembershipError):
    status_code = 503
    default_message = "Could not allocate a membership number"


class PersistenceError(MembershipError):
    status_code = 500
    default_message = "Failed to save changes. Please try again later."
