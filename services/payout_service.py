"""
Payout generation service.

Turns completed orders into pending payout rows using the revenue-share
calculator. At most one payout exists per order:

- single order: look up an existing payout first; a unique violation on
  insert (concurrent run) resolves to the existing row
- batch: drop orders that already have a payout before computing splits,
  compute every split before writing anything, then insert in bulk

Repeated invocations (retried webhooks, repeated admin runs) are no-ops.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from postgrest.exceptions import APIError

from domain.order import Order
from domain.payout import Payout
from domain.product import RateLike
from repositories.client import is_unique_violation
from repositories.order_repository import list_completed_orders
from repositories.payout_repository import (
    get_payout_by_order_id,
    insert_payouts,
    list_paid_out_order_ids,
    new_pending_payout,
)
from repositories.product_repository import get_products_by_ids
from services.revenue_share import split, split_for_product

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PayoutBatchResult:
    """
    Result of a batch run.

    generated: number of payouts created by this run
    payouts: the created payouts
    message: human-readable summary
    """
    generated: int
    payouts: List[Payout]
    message: str


def generate_payout_for_order(
    order: Order,
    *,
    brand_id: Optional[UUID],
    creator_rate: RateLike,
    platform_rate: RateLike,
) -> Payout:
    """
    Create the payout for a single order, or return the one that exists.

    Args:
        order: A completed order
        brand_id: Owner of the ordered product
        creator_rate: Creator share to apply
        platform_rate: Platform take to apply

    Returns:
        The order's payout (new or pre-existing)

    Raises:
        ValidationError: If the rates are invalid
    """
    existing = get_payout_by_order_id(order.order_id)
    if existing is not None:
        logger.info("Payout already exists, skipping", extra={"order_id": str(order.order_id)})
        return existing

    share = split(order.amount, creator_rate, platform_rate)
    payout = new_pending_payout(
        order_id=order.order_id,
        gross_amount=share.gross_amount,
        creator_amount=share.creator_amount,
        platform_amount=share.platform_amount,
        brand_amount=share.brand_amount,
        creator_id=order.creator_id,
        brand_id=brand_id,
    )

    try:
        created = insert_payouts([payout])[0]
    except APIError as exc:
        if not is_unique_violation(exc):
            raise
        existing = get_payout_by_order_id(order.order_id)
        if existing is None:
            raise
        logger.info("Payout created concurrently, reusing", extra={"order_id": str(order.order_id)})
        return existing

    logger.info(
        "Payout generated",
        extra={"order_id": str(order.order_id), "payout_id": str(created.payout_id)},
    )
    return created


def _insert_one_by_one(payouts: List[Payout]) -> List[Payout]:
    created: List[Payout] = []
    for payout in payouts:
        try:
            created.extend(insert_payouts([payout]))
        except APIError as exc:
            if not is_unique_violation(exc):
                raise
            logger.info("Payout created concurrently, skipping", extra={"order_id": str(payout.order_id)})
    return created


def generate_payouts(order_id: Optional[UUID] = None, dry_run: bool = False) -> PayoutBatchResult:
    """
    Generate payouts for completed orders that do not have one yet.

    Process:
    1. Fetch completed orders (optionally only order_id)
    2. Drop orders that already have a payout
    3. Load the products of the remaining orders in one query
    4. Compute every split (an invalid rate configuration aborts the run
       before anything is written)
    5. Insert all payouts in one request; if another run inserted some of
       them in the meantime, fall back to per-order inserts that skip
       duplicates

    Args:
        order_id: Restrict the run to a single order
        dry_run: Compute the payouts without inserting them

    Returns:
        PayoutBatchResult (generated counts the would-be payouts on a dry run)

    Example:
        result = generate_payouts()
        print(result.message)  # "Generated 12 payouts"
    """
    orders = list_completed_orders(order_id)

    if not orders:
        return PayoutBatchResult(generated=0, payouts=[], message="No orders to process")

    paid_out = list_paid_out_order_ids(order.order_id for order in orders)
    orders_to_process = [order for order in orders if order.order_id not in paid_out]

    if not orders_to_process:
        return PayoutBatchResult(generated=0, payouts=[], message="All orders already have payouts")

    products = get_products_by_ids(order.product_id for order in orders_to_process)

    pending: List[Payout] = []
    for order in orders_to_process:
        product = products.get(order.product_id)
        share = split_for_product(order.amount, product)
        pending.append(
            new_pending_payout(
                order_id=order.order_id,
                gross_amount=share.gross_amount,
                creator_amount=share.creator_amount,
                platform_amount=share.platform_amount,
                brand_amount=share.brand_amount,
                creator_id=order.creator_id,
                brand_id=product.owner_id if product else None,
            )
        )

    if dry_run:
        return PayoutBatchResult(
            generated=len(pending),
            payouts=pending,
            message=f"Would generate {len(pending)} payouts",
        )

    try:
        created = insert_payouts(pending)
    except APIError as exc:
        if not is_unique_violation(exc):
            raise
        logger.warning("Bulk payout insert hit existing payouts, retrying per order")
        created = _insert_one_by_one(pending)

    logger.info("Payout batch finished", extra={"generated": len(created), "candidates": len(orders)})

    return PayoutBatchResult(
        generated=len(created),
        payouts=created,
        message=f"Generated {len(created)} payouts",
    )


__all__ = ["PayoutBatchResult", "generate_payout_for_order", "generate_payouts"]
