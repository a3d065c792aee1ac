"""
Domain: Order (one purchase event).

Rules implemented here:
- amount is a positive integer in the smallest currency unit (no floats).
- created_at is a UTC timestamp.
- An order is immutable once recorded; status transitions such as refunds
  happen outside the settlement pipeline.

The uniqueness of payment_session_id is a store-level guarantee and is
enforced by the ingestion services, not by this entity.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from .time import require_utc_timestamp


class OrderStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class OrderSource(str, Enum):
    STRIPE = "stripe"
    DIRECT = "direct"


def require_positive_amount(name: str, value: object) -> int:
    """
    Validate a monetary amount in the smallest currency unit.

    Booleans are rejected even though they are ints in Python.
    """

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer amount in the smallest currency unit")
    if value <= 0:
        raise ValueError(f"{name} must be greater than 0")
    return value


@dataclass(frozen=True, slots=True)
class Order:
    """
    Immutable record of a single purchase.

    creator_id is nullable: an order may arrive without attribution.
    payment_session_id holds the payment processor's checkout session id and
    is the idempotency key for payment confirmations.
    """

    order_id: UUID
    product_id: UUID
    amount: int
    status: OrderStatus
    created_at: datetime
    creator_id: Optional[UUID] = None
    payment_session_id: Optional[str] = None
    affiliate_link_id: Optional[UUID] = None
    source: Optional[OrderSource] = None
    payment_intent_id: Optional[str] = None
    product_name: Optional[str] = None
    unit_price: Optional[int] = None
    idempotency_key: Optional[str] = None
    client_ip: Optional[str] = None

    def __post_init__(self) -> None:
        require_positive_amount("amount", self.amount)
        require_utc_timestamp("created_at", self.created_at)

    @property
    def is_completed(self) -> bool:
        return self.status is OrderStatus.COMPLETED
