"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to and a client-safe default
message. Handlers in ``filevault.main`` turn them into the standard
``{"success": false, "message": ...}`` envelope.
"""
from typing import Optional


class FileVaultError(Exception):
    """Base class for all errors raised deliberately by FileVault"""

    status_code: int = 500
    message: str = "An unexpected error occurred"
    code: Optional[str] = None

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


# ---------------------------------------------------------------------------
# Caller errors
# ---------------------------------------------------------------------------

class ValidationError(FileVaultError):
    status_code = 400
    message = "Validation failed"


class IdentifierMalformed(ValidationError):
    message = "Invalid id format. Must be valid email or phone number"


class EmptyPayload(ValidationError):
    message = "No file uploaded"


class PayloadTooLarge(FileVaultError):
    status_code = 413
    message = "File too large"


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

class AuthenticationError(FileVaultError):
    status_code = 401
    message = "Authentication required"


class InvalidCredentials(AuthenticationError):
    message = "Invalid credentials"


class InvalidToken(AuthenticationError):
    message = "Invalid token"


class TokenExpired(AuthenticationError):
    message = "Token expired"
    code = "TOKEN_EXPIRED"


class TokenRevoked(AuthenticationError):
    message = "Token has been revoked"


class ExpiredOrInvalidRefreshToken(AuthenticationError):
    """Raised for unknown, revoked and expired refresh tokens alike"""

    message = "Invalid or expired refresh token"


# ---------------------------------------------------------------------------
# Resource state
# ---------------------------------------------------------------------------

class ConflictError(FileVaultError):
    status_code = 409
    message = "Resource already exists"


class IdentifierTaken(ConflictError):
    message = "User already exists"


class NotFoundError(FileVaultError):
    """Missing resource, or one owned by somebody else"""

    status_code = 404
    message = "File not found"


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------

class InfrastructureError(FileVaultError):
    """Store or disk failure unrelated to the request itself; safe to retry"""

    status_code = 503
    message = "Service temporarily unavailable. Please retry later."


class BlobCollision(InfrastructureError):
    """A freshly generated storage name already exists in the blob store"""
