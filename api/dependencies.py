"""
Shared FastAPI dependencies: caller identity, network origin, rate limiters.

Rate limiters are per-process objects created here and injected into the
routers, so tests can replace them through app.dependency_overrides.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from domain.actor import Actor
from repositories.auth_repository import get_actor_for_token
from services.errors import RateLimitedError
from services.rate_limiter import RateLimiter, build_key

# Orders create: 10 requests / 1 minute per actor + origin
_orders_limiter = RateLimiter(max_requests=10, window_seconds=60)
# Fraud detect: 20 requests / 5 minutes per actor + origin
_fraud_limiter = RateLimiter(max_requests=20, window_seconds=5 * 60)


def get_orders_rate_limiter() -> RateLimiter:
    return _orders_limiter


def get_fraud_rate_limiter() -> RateLimiter:
    return _fraud_limiter


def resolve_actor(authorization: Optional[str]) -> Optional[Actor]:
    """
    Resolve the caller from an `Authorization: Bearer <token>` header value.

    Returns None for anonymous callers and for invalid tokens; each endpoint
    decides whether an actor is required. Rate-limited endpoints call this
    inside the handler, after the origin check, so the token lookup is
    itself behind the limit.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None

    return get_actor_for_token(token.strip())


def get_optional_actor(authorization: Optional[str] = Header(default=None)) -> Optional[Actor]:
    return resolve_actor(authorization)


def get_client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, then X-Real-IP, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


def enforce_rate_limit(
    limiter: RateLimiter,
    actor_id: Optional[object],
    client_ip: str,
    endpoint: str,
) -> None:
    """
    Raises:
        RateLimitedError: When the key is over its limit
    """
    decision = limiter.check(build_key(actor_id, client_ip, endpoint))
    if not decision.allowed:
        raise RateLimitedError(retry_after=decision.retry_after)


__all__ = [
    "resolve_actor",
    "get_optional_actor",
    "get_client_ip",
    "get_orders_rate_limiter",
    "get_fraud_rate_limiter",
    "enforce_rate_limit",
]
