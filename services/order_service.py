"""
Direct order creation.

A creator-class actor records a purchase (e.g. a referral-driven demo
purchase). Handles:
- Role check before any store access
- Affiliate code resolution to the attributed creator
- Optional caller-supplied idempotency key so a double-submitted request
  yields one order
- Fire-and-forget fraud screening of newly created orders
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional
from uuid import UUID

from postgrest.exceptions import APIError

from domain.actor import Actor
from domain.order import Order, OrderSource, OrderStatus, require_positive_amount
from repositories.affiliate_link_repository import get_active_link_by_code
from repositories.client import is_unique_violation
from repositories.order_repository import get_order_by_idempotency_key, insert_order
from repositories.product_repository import get_product_by_id
from services.errors import AuthenticationError, AuthorizationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OrderRequest:
    """
    Request to record an order directly.

    affiliate_code: referral code; when it resolves for this product the
        link's creator is credited instead of the caller
    idempotency_key: optional key; repeating a request with the same key
        returns the first order
    """
    product_id: UUID
    amount: int
    affiliate_code: Optional[str] = None
    idempotency_key: Optional[str] = None


def create_order(
    actor: Optional[Actor],
    request: OrderRequest,
    *,
    client_ip: Optional[str] = None,
    on_created: Optional[Callable[[Order], None]] = None,
) -> Order:
    """
    Record a completed order on behalf of a creator.

    Process:
    1. Check the actor is a creator-class account
    2. Validate the amount is a positive integer
    3. Verify the product exists
    4. Return the existing order if the idempotency key was already used
    5. Resolve the affiliate code (unresolvable codes are ignored)
    6. Insert the order as completed
    7. Hand the new order to on_created (fraud screening)

    Args:
        actor: Authenticated caller
        request: Order details
        client_ip: Network origin of the request
        on_created: Called once, only for newly inserted orders

    Returns:
        The order (new or pre-existing for the idempotency key)

    Raises:
        AuthenticationError: No actor
        AuthorizationError: Actor is not a creator
        ValidationError: Amount is not a positive integer
        NotFoundError: Product does not exist
    """
    if actor is None:
        raise AuthenticationError("Unauthorized")
    if not actor.can_create_orders():
        raise AuthorizationError("Creator access required")

    try:
        amount = require_positive_amount("amount", request.amount)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    product = get_product_by_id(request.product_id)
    if product is None:
        raise NotFoundError(f"Product not found: {request.product_id}")

    if request.idempotency_key:
        existing = get_order_by_idempotency_key(request.idempotency_key)
        if existing is not None:
            logger.info("Order already recorded for idempotency key", extra={"order_id": str(existing.order_id)})
            return existing

    creator_id = actor.actor_id
    affiliate_link_id = None

    if request.affiliate_code:
        link = get_active_link_by_code(request.affiliate_code, product.product_id)
        if link is not None:
            creator_id = link.creator_id
            affiliate_link_id = link.link_id

    try:
        order = insert_order(
            product_id=product.product_id,
            amount=amount,
            creator_id=creator_id,
            status=OrderStatus.COMPLETED,
            source=OrderSource.DIRECT,
            affiliate_link_id=affiliate_link_id,
            product_name=product.name or None,
            unit_price=product.price,
            idempotency_key=request.idempotency_key,
            client_ip=client_ip,
        )
    except APIError as exc:
        if not (request.idempotency_key and is_unique_violation(exc)):
            raise
        existing = get_order_by_idempotency_key(request.idempotency_key)
        if existing is None:
            raise
        return existing

    logger.info(
        "Order created",
        extra={"order_id": str(order.order_id), "product_id": str(order.product_id), "source": "direct"},
    )

    if on_created is not None:
        on_created(order)

    return order


__all__ = ["OrderRequest", "create_order"]
