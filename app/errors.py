# app/errors.py
"""
Error taxonomy shared by the services and mapped to HTTP responses in main.py
"""

from typing import Optional


class TaskFlowError(Exception):
    """Base class for errors raised by the TaskFlow services"""

    status_code = 500
    code = "error"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return self.message


class ValidationError(TaskFlowError):
    """Bad input caught before it reaches the store"""

    status_code = 400
    code = "validation-error"


AUTH_ERROR_MESSAGES = {
    "auth/email-already-in-use": "An account with this email already exists.",
    "auth/invalid-email": "Please enter a valid email address.",
    "auth/weak-password": "Password should be at least 6 characters long.",
    "auth/user-not-found": "No account found with this email address.",
    "auth/invalid-credential": "Failed to log in. Please check your credentials.",
    "auth/invalid-session": "Your session has expired. Please log in again.",
    "auth/expired-action-code": "The password reset link has expired. Please request a new one.",
    "auth/invalid-action-code": "Invalid password reset link. Please request a new one.",
    "auth/too-many-requests": "Too many requests. Please try again later.",
    "auth/network-request-failed": "Network error. Please check your internet connection.",
    "auth/operation-not-allowed": "Email/password accounts are not enabled. Please contact support.",
}


UNAUTHORIZED_CODES = {"auth/invalid-credential", "auth/invalid-session"}


def describe_auth_error(code: str) -> str:
    """Human-readable reason for an identity provider error code"""
    return AUTH_ERROR_MESSAGES.get(code, "An unexpected error occurred.")


class AuthError(TaskFlowError):
    """The identity provider rejected a credential or an operation"""

    code = "auth/error"

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(message or describe_auth_error(code), code=code)

    @property
    def status_code(self) -> int:
        # Rejected credentials are 401, rejected operations (signup, reset) are 400
        return 401 if self.code in UNAUTHORIZED_CODES else 400


class PermissionDenied(TaskFlowError):
    """The session's role does not carry the capability an action needs"""

    status_code = 403
    code = "permission-denied"


class NotFoundError(TaskFlowError):
    status_code = 404
    code = "not-found"


class StoreError(TaskFlowError):
    """A read, write or delete against the directory store failed"""

    status_code = 500
    code = "store-error"


class NotificationError(TaskFlowError):
    """Sending a notification failed; callers log it and carry on"""

    status_code = 500
    code = "notification-error"
