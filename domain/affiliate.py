"""
Domain: Affiliate link binding a creator to a product through a unique code.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from .time import require_utc_timestamp

AFFILIATE_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
AFFILIATE_CODE_LENGTH = 8


@dataclass(frozen=True, slots=True)
class AffiliateLink:
    link_id: UUID
    product_id: UUID
    creator_id: UUID
    affiliate_code: str
    status: str = "active"  # active, inactive
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
