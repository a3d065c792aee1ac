"""
Domain: Tournaments (time-boxed sales competitions).

A tournament scores creators by the revenue attributed to them between
start_at and end_at (both inclusive), optionally restricted to one product.

Status lifecycle: scheduled -> live -> finished. Transitions are driven by
time or by an administrator; every status is a valid ranking target.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from .time import require_utc_timestamp


class TournamentStatus(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    FINISHED = "finished"


@dataclass(frozen=True, slots=True)
class Tournament:
    tournament_id: UUID
    slug: str
    title: str
    status: TournamentStatus
    start_at: datetime
    end_at: datetime
    product_id: Optional[UUID] = None
    description: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("start_at", self.start_at)
        require_utc_timestamp("end_at", self.end_at)
        if self.end_at < self.start_at:
            raise ValueError("end_at must not be earlier than start_at")
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    def contains(self, moment: datetime) -> bool:
        """True if moment falls inside [start_at, end_at]."""
        return self.start_at <= moment <= self.end_at


@dataclass(frozen=True, slots=True)
class TournamentRankingRow:
    """One creator's aggregated standing in a tournament."""

    tournament_id: UUID
    creator_id: UUID
    total_orders: int
    total_revenue: int
    rank: int
