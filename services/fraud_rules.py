"""
Fraud rule engine (pure).

Evaluates a completed order plus contextual aggregates against independent
rules. Each rule returns at most one flag; every triggered rule is
collected, nothing short-circuits.

Rules:
- Self-dealing: creator_id equals the product owner (brand) -> high
- Burst orders: creator has >= 5 completed orders in the trailing 5 minutes -> medium
- Amount anomaly: amount exceeds 3x the global average completed amount -> low
- Low-amount test charge: amount below 100 -> low
- Same-origin burst: >= 3 recent orders from one network origin -> medium

A rule whose context is missing (None) does not fire. Flags are advisory
and never block order creation or payouts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Callable, List, Optional
from uuid import UUID

from domain.fraud import FraudFlag, FraudSeverity
from domain.order import Order

BURST_WINDOW = timedelta(minutes=5)
BURST_THRESHOLD = 5
ANOMALY_MULTIPLIER = 3
LOW_AMOUNT_THRESHOLD = 100
SAME_ORIGIN_WINDOW = timedelta(minutes=5)
SAME_ORIGIN_THRESHOLD = 3


@dataclass(frozen=True, slots=True)
class FraudContext:
    """
    Aggregates gathered from the ledger for one evaluation.

    brand_id: owner of the ordered product
    recent_order_count: creator's completed orders in the trailing burst window
    average_amount: mean amount over all completed orders
    same_origin_order_count: completed orders from the order's network origin
    """

    brand_id: Optional[UUID] = None
    recent_order_count: Optional[int] = None
    average_amount: Optional[Decimal] = None
    same_origin_order_count: Optional[int] = None


def _flag(order: Order, context: FraudContext, reason: str, severity: FraudSeverity) -> FraudFlag:
    return FraudFlag(
        order_id=order.order_id,
        creator_id=order.creator_id,
        brand_id=context.brand_id,
        reason=reason,
        severity=severity,
    )


def detect_self_dealing(order: Order, context: FraudContext) -> Optional[FraudFlag]:
    """Brand buying its own product through its own attribution."""
    if order.creator_id and context.brand_id and order.creator_id == context.brand_id:
        return _flag(
            order,
            context,
            "Self-purchase detected (creator_id === brand_id)",
            FraudSeverity.HIGH,
        )
    return None


def detect_burst_orders(order: Order, context: FraudContext) -> Optional[FraudFlag]:
    count = context.recent_order_count
    if count is not None and count >= BURST_THRESHOLD:
        minutes = int(BURST_WINDOW.total_seconds() // 60)
        return _flag(
            order,
            context,
            f"Burst orders detected ({count} orders in {minutes} minutes)",
            FraudSeverity.MEDIUM,
        )
    return None


def detect_amount_anomaly(order: Order, context: FraudContext) -> Optional[FraudFlag]:
    average = context.average_amount
    if average is None or average <= 0:
        return None
    if order.amount > average * ANOMALY_MULTIPLIER:
        return _flag(
            order,
            context,
            f"Amount anomaly detected ({order.amount:,} vs avg {int(average):,})",
            FraudSeverity.LOW,
        )
    return None


def detect_low_amount(order: Order, context: FraudContext) -> Optional[FraudFlag]:
    # Tiny orders are typically card-testing charges.
    if order.amount < LOW_AMOUNT_THRESHOLD:
        return _flag(
            order,
            context,
            f"Low amount order detected ({order.amount})",
            FraudSeverity.LOW,
        )
    return None


def detect_same_origin_orders(order: Order, context: FraudContext) -> Optional[FraudFlag]:
    count = context.same_origin_order_count
    if count is not None and count >= SAME_ORIGIN_THRESHOLD:
        return _flag(
            order,
            context,
            f"Same IP orders detected ({count} orders from same IP)",
            FraudSeverity.MEDIUM,
        )
    return None


Rule = Callable[[Order, FraudContext], Optional[FraudFlag]]

RULES: tuple[Rule, ...] = (
    detect_self_dealing,
    detect_burst_orders,
    detect_amount_anomaly,
    detect_low_amount,
    detect_same_origin_orders,
)


def evaluate(order: Order, context: FraudContext) -> List[FraudFlag]:
    """
    Run every rule against an order.

    Args:
        order: The order under review
        context: Aggregates gathered for this order

    Returns:
        Flags in rule order (possibly empty)

    Example:
        flags = evaluate(order, FraudContext(brand_id=order.creator_id))
        # [FraudFlag(severity=FraudSeverity.HIGH, reason="Self-purchase detected ...")]
    """
    flags: List[FraudFlag] = []
    for rule in RULES:
        flag = rule(order, context)
        if flag is not None:
            flags.append(flag)
    return flags


__all__ = [
    "FraudContext",
    "evaluate",
    "detect_self_dealing",
    "detect_burst_orders",
    "detect_amount_anomaly",
    "detect_low_amount",
    "detect_same_origin_orders",
    "BURST_WINDOW",
    "BURST_THRESHOLD",
    "SAME_ORIGIN_WINDOW",
]
