"""
Domain: Fraud flags.

A flag is advisory: it marks an order for human review and never blocks
order creation or payout generation. Only `reviewed` and `note` change after
creation, and only through the admin review screens.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from .time import require_utc_timestamp


class FraudSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class FraudFlag:
    order_id: UUID
    reason: str
    severity: FraudSeverity
    creator_id: Optional[UUID] = None
    brand_id: Optional[UUID] = None
    reviewed: bool = False
    note: Optional[str] = None
    flag_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
