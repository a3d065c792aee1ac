"""
Affiliate link issuance.

A creator joins a product's campaign by requesting a link. Each
(product, creator) pair has at most one active link; asking again returns
the existing code.
"""

from __future__ import annotations

import logging
import secrets
from typing import Callable, Optional, Tuple
from uuid import UUID

from domain.actor import Actor
from domain.affiliate import AFFILIATE_CODE_ALPHABET, AFFILIATE_CODE_LENGTH, AffiliateLink
from repositories.affiliate_link_repository import (
    affiliate_code_exists,
    get_active_link_for_creator,
    insert_affiliate_link,
)
from repositories.product_repository import get_product_by_id
from services.errors import AuthenticationError, AuthorizationError, NotFoundError

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 10


def generate_affiliate_code() -> str:
    """Random 8-character code from A-Z and 0-9."""
    return "".join(secrets.choice(AFFILIATE_CODE_ALPHABET) for _ in range(AFFILIATE_CODE_LENGTH))


def create_affiliate_link(
    actor: Optional[Actor],
    product_id: UUID,
    code_factory: Callable[[], str] = generate_affiliate_code,
) -> Tuple[AffiliateLink, bool]:
    """
    Issue (or return) the actor's affiliate link for a product.

    Args:
        actor: Authenticated caller (creator-class)
        product_id: Active product to promote
        code_factory: Code generator (tests)

    Returns:
        (link, created) where created is False for a pre-existing link

    Raises:
        AuthenticationError / AuthorizationError: Caller is not a creator
        NotFoundError: Product missing or inactive
        RuntimeError: No unique code found after 10 attempts
    """
    if actor is None:
        raise AuthenticationError("Unauthorized")
    if not actor.can_create_orders():
        raise AuthorizationError("Creator access required")

    product = get_product_by_id(product_id)
    if product is None or not product.is_active():
        raise NotFoundError("Product not found or not active")

    existing = get_active_link_for_creator(product_id, actor.actor_id)
    if existing is not None:
        return existing, False

    for _ in range(MAX_CODE_ATTEMPTS):
        code = code_factory()
        if not affiliate_code_exists(code):
            break
    else:
        raise RuntimeError("Failed to generate unique affiliate code")

    link = insert_affiliate_link(product_id, actor.actor_id, code)
    logger.info("Affiliate link created", extra={"link_id": str(link.link_id), "product_id": str(product_id)})
    return link, True


__all__ = ["create_affiliate_link", "generate_affiliate_code"]
