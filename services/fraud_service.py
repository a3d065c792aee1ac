"""
Fraud detection service.

Gathers the context the rule engine needs for one order, runs the rules and
records any resulting flags. The rule engine itself is pure
(services.fraud_rules); this module owns the ledger reads and writes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List
from uuid import UUID

from domain.fraud import FraudFlag
from repositories.fraud_flag_repository import insert_fraud_flags
from repositories.order_repository import (
    count_completed_orders,
    get_average_completed_amount,
    get_order_by_id,
)
from repositories.product_repository import get_product_by_id
from services.errors import NotFoundError
from services.fraud_rules import BURST_WINDOW, SAME_ORIGIN_WINDOW, FraudContext, evaluate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FraudDetectionResult:
    flags: List[FraudFlag]
    message: str


def detect_fraud(order_id: UUID) -> FraudDetectionResult:
    """
    Screen one order and persist any fraud flags.

    Orders that are not completed are skipped. Flags are advisory; nothing
    here changes the order or its payout.

    Args:
        order_id: Order to screen

    Returns:
        FraudDetectionResult with the persisted flags

    Raises:
        NotFoundError: If the order does not exist
    """
    order = get_order_by_id(order_id)
    if order is None:
        raise NotFoundError(f"Order not found: {order_id}")

    if not order.is_completed:
        return FraudDetectionResult(
            flags=[],
            message="Order status is not completed, skipping fraud detection",
        )

    product = get_product_by_id(order.product_id)
    brand_id = product.owner_id if product else None

    recent_order_count = None
    if order.creator_id:
        recent_order_count = count_completed_orders(
            start=order.created_at - BURST_WINDOW,
            end=order.created_at,
            creator_id=order.creator_id,
        )

    same_origin_order_count = None
    if order.client_ip:
        same_origin_order_count = count_completed_orders(
            start=order.created_at - SAME_ORIGIN_WINDOW,
            end=order.created_at,
            client_ip=order.client_ip,
        )

    context = FraudContext(
        brand_id=brand_id,
        recent_order_count=recent_order_count,
        average_amount=get_average_completed_amount(),
        same_origin_order_count=same_origin_order_count,
    )

    flags = evaluate(order, context)
    if not flags:
        return FraudDetectionResult(flags=[], message="No fraud detected")

    saved = insert_fraud_flags(flags)
    logger.warning(
        f"Fraud flag(s) raised for order {order.order_id}",
        extra={
            "order_id": str(order.order_id),
            "severities": [flag.severity.value for flag in flags],
        },
    )
    return FraudDetectionResult(flags=saved, message=f"Detected {len(saved)} fraud flag(s)")


__all__ = ["FraudDetectionResult", "detect_fraud"]
