"""
Translation of service errors into HTTP errors.

Response bodies carry a message and an error type; internal failures get a
generic message and their details go to the server log only.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException

from services.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    RateLimitedError,
    SettlementError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[SettlementError], int] = {
    ValidationError: 400,
    AuthenticationError: 401,
    AuthorizationError: 403,
    NotFoundError: 404,
    RateLimitedError: 429,
}


def to_http_exception(error: SettlementError) -> HTTPException:
    """Map a SettlementError to an HTTPException with the matching status."""
    status_code = 500
    for error_class, code in _STATUS_CODES.items():
        if isinstance(error, error_class):
            status_code = code
            break

    headers = None
    if isinstance(error, RateLimitedError) and error.retry_after:
        headers = {"Retry-After": str(max(1, int(error.retry_after)))}

    return HTTPException(
        status_code=status_code,
        detail={"error": str(error), "type": error.error_type},
        headers=headers,
    )


def internal_error(action: str) -> HTTPException:
    """Log the active exception and return a generic 500."""
    logger.exception(f"Unexpected error: {action}")
    return HTTPException(
        status_code=500,
        detail={"error": "Internal server error", "type": "INTERNAL_SERVER_ERROR"},
    )


__all__ = ["to_http_exception", "internal_error"]
