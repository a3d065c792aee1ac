"""
Domain: Payout (settlement record for one order).

Invariant: creator_amount + platform_amount + brand_amount == gross_amount.
No currency unit may be created or lost by a split.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from .time import require_utc_timestamp


class PayoutStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


@dataclass(frozen=True, slots=True)
class Payout:
    payout_id: UUID
    order_id: UUID
    gross_amount: int
    creator_amount: int
    platform_amount: int
    brand_amount: int
    creator_id: Optional[UUID] = None
    brand_id: Optional[UUID] = None
    status: PayoutStatus = PayoutStatus.PENDING
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        parts = self.creator_amount + self.platform_amount + self.brand_amount
        if parts != self.gross_amount:
            raise ValueError(
                f"Payout parts ({parts}) must sum to gross_amount ({self.gross_amount})"
            )
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
