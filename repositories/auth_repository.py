"""
Auth repository: resolves bearer tokens to actors through Supabase Auth.
"""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from domain.actor import Actor
from repositories.client import get_supabase

logger = logging.getLogger(__name__)


def get_actor_for_token(access_token: str) -> Optional[Actor]:
    """
    Look up the user behind an access token.

    Args:
        access_token: Supabase access token (JWT) from the Authorization header

    Returns:
        Actor with the role from user metadata, or None when the token is
        invalid or expired
    """
    try:
        response = get_supabase().auth.get_user(access_token)
    except Exception as exc:  # supabase-auth raises its own AuthApiError family
        logger.info("Access token rejected", extra={"reason": type(exc).__name__})
        return None

    user = getattr(response, "user", None)
    if user is None:
        return None

    metadata = getattr(user, "user_metadata", None) or {}
    return Actor(
        actor_id=UUID(str(user.id)),
        role=metadata.get("role"),
        email=getattr(user, "email", None),
    )


__all__ = ["get_actor_for_token"]
