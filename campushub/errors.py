"""
Error taxonomy shared by every service.

Each error carries the user-visible message and the HTTP status it maps to.
The gateway renders them as `{"success": false, "msg": ...}`.
"""

from typing import List, Optional


class CampusHubError(Exception):
    """Base class for errors that are safe to show to the client."""

    status_code = 500
    default_msg = "Server error"

    def __init__(self, msg: Optional[str] = None) -> None:
        self.msg = msg or self.default_msg
        super().__init__(self.msg)

    def to_dict(self) -> dict:
        return {"success": False, "msg": self.msg}


# --- VALIDATION ---
class ValidationError(CampusHubError):
    status_code = 400
    default_msg = "Invalid input"

    def __init__(self, errors: Optional[List[str]] = None, msg: Optional[str] = None) -> None:
        super().__init__(msg)
        self.errors = errors or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


# --- AUTH ---
class AuthError(CampusHubError):
    status_code = 401
    default_msg = "Access denied"


class Unauthenticated(AuthError):
    status_code = 401
    default_msg = "Access denied"


class InvalidCredential(AuthError):
    """Token present but malformed, expired or wrongly signed."""

    status_code = 400
    default_msg = "Invalid token"


class Forbidden(AuthError):
    status_code = 403
    default_msg = "Access denied"


class InvalidCredentials(AuthError):
    """Signin failure. Same message whether the email or the password was wrong."""

    status_code = 400
    default_msg = "Invalid credentials"


# --- NOT FOUND ---
class NotFoundError(CampusHubError):
    status_code = 404
    default_msg = "Not found"


class EventNotFound(NotFoundError):
    default_msg = "Event not found"


class AccountNotFound(NotFoundError):
    default_msg = "Account not found"


# --- CONFLICT ---
class ConflictError(CampusHubError):
    status_code = 400
    default_msg = "Conflict"


class AccountExists(ConflictError):
    default_msg = "Account already exists"


class AlreadyRegistered(ConflictError):
    default_msg = "Already registered"


# --- DEPENDENCIES ---
class DependencyError(CampusHubError):
    status_code = 500
    default_msg = "Server error"


class PersistenceFailure(DependencyError):
    """Wraps any storage error. The original exception stays in the log only."""
