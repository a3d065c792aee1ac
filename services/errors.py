"""
Error taxonomy for the settlement pipeline.

Every error a caller can act on derives from SettlementError and carries an
error_type that the API layer maps to an HTTP status. Store failures are not
part of this hierarchy; repositories raise RuntimeError for those.

Idempotent duplicates (a redelivered payment session, a second payout run)
are never errors.
"""

from __future__ import annotations


class SettlementError(Exception):
    """Base class for expected, caller-facing failures."""

    error_type: str = "INTERNAL_SERVER_ERROR"


class ValidationError(SettlementError, ValueError):
    """Malformed or missing input, or an invalid rate configuration."""

    error_type = "VALIDATION_ERROR"


class SignatureVerificationError(ValidationError):
    """Payment event signature is missing, malformed, stale or wrong."""


class AuthenticationError(SettlementError):
    """No (valid) identity was presented."""

    error_type = "UNAUTHORIZED"


class AuthorizationError(SettlementError):
    """The caller is identified but lacks the required role."""

    error_type = "FORBIDDEN"


class NotFoundError(SettlementError):
    """A referenced product, order or tournament does not exist."""

    error_type = "NOT_FOUND"


class RateLimitedError(SettlementError):
    """Too many requests for this actor/origin/endpoint within the window."""

    error_type = "RATE_LIMIT_EXCEEDED"

    def __init__(self, message: str = "Too many requests. Please try again later.", retry_after: float = 0.0):
        self.retry_after = retry_after
        super().__init__(message)


__all__ = [
    "SettlementError",
    "ValidationError",
    "SignatureVerificationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitedError",
]
