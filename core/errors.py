"""
core/errors.py -- Typed service errors shared by auth/, shipments/ and api/.

Every failure the service reports to a client is one of these classes. Each
carries a stable machine-readable code, the HTTP status it maps to, and a
user-facing message. The API layer registers a single exception handler for
ServiceError and renders the same envelope for all of them, so route code
raises and never builds error responses by hand.

Messages are deliberately generic. InvalidCredentials in particular has one
message for "no such user" and "wrong password" so a caller cannot enumerate
usernames.

Layer rule: no imports from api/, auth/, or shipments/.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    code: str = "service_error"
    status_code: int = 500
    message: str = "An unexpected error occurred."
    # Extra response headers the exception handler should attach.
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class InvalidInput(ServiceError):
    code = "invalid_input"
    status_code = 400
    message = "Required fields are missing or invalid."


class InvalidCredentials(ServiceError):
    code = "invalid_credentials"
    status_code = 401
    message = "Invalid username or password."


class AccountInactive(ServiceError):
    code = "account_inactive"
    status_code = 403
    message = "Your account is inactive. Contact an administrator."


class TokenMissing(ServiceError):
    code = "token_missing"
    status_code = 403
    message = "Authentication token not provided."


class TokenInvalid(ServiceError):
    code = "token_invalid"
    status_code = 401
    message = "Authentication token is invalid or expired."


class TokenExpired(ServiceError):
    code = "token_expired"
    status_code = 401
    message = "Authentication token is invalid or expired."


class Forbidden(ServiceError):
    code = "forbidden"
    status_code = 403
    message = "You do not have permission to perform this action."


class NotFound(ServiceError):
    code = "not_found"
    status_code = 404
    message = "Resource not found."


class NoChanges(ServiceError):
    code = "no_changes"
    status_code = 400
    message = "No fields to update."


class AggregationFailed(ServiceError):
    code = "aggregation_failed"
    status_code = 500
    message = "Failed to compute statistics."
