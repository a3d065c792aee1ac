"""
Payout repository (persistence).

Only inserts and fetches payout rows. The one-payout-per-order rule is
enforced by the payout service, backed by the unique constraint on
payouts.order_id.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.payout import Payout, PayoutStatus
from domain.time import parse_utc_datetime, to_iso_utc, utc_now
from repositories.client import get_supabase

_PAYOUTS_TABLE: str = "payouts"

# Order ids per IN (...) lookup.
_ID_BATCH_SIZE: int = 250


def _row_to_payout(row: Mapping[str, Any]) -> Payout:
    """Convert a Supabase row into a Payout."""

    creator_id = row.get("creator_id")
    brand_id = row.get("brand_id")
    return Payout(
        payout_id=UUID(str(row["id"])),
        order_id=UUID(str(row["order_id"])),
        gross_amount=int(row["gross_amount"]),
        creator_amount=int(row["creator_amount"]),
        platform_amount=int(row["platform_amount"]),
        brand_amount=int(row["brand_amount"]),
        creator_id=UUID(str(creator_id)) if creator_id else None,
        brand_id=UUID(str(brand_id)) if brand_id else None,
        status=PayoutStatus(str(row.get("status") or PayoutStatus.PENDING.value)),
        created_at=parse_utc_datetime(row["created_at"]) if row.get("created_at") else None,
    )


def _payout_to_row(payout: Payout) -> dict[str, Any]:
    return {
        "id": str(payout.payout_id),
        "order_id": str(payout.order_id),
        "creator_id": str(payout.creator_id) if payout.creator_id else None,
        "brand_id": str(payout.brand_id) if payout.brand_id else None,
        "gross_amount": payout.gross_amount,
        "creator_amount": payout.creator_amount,
        "platform_amount": payout.platform_amount,
        "brand_amount": payout.brand_amount,
        "status": payout.status.value,
        "created_at": to_iso_utc(payout.created_at, name="created_at") if payout.created_at else None,
    }


def new_pending_payout(
    order_id: UUID,
    gross_amount: int,
    creator_amount: int,
    platform_amount: int,
    brand_amount: int,
    creator_id: Optional[UUID] = None,
    brand_id: Optional[UUID] = None,
) -> Payout:
    """Build (but do not persist) a pending payout with a fresh id."""

    return Payout(
        payout_id=uuid4(),
        order_id=order_id,
        gross_amount=gross_amount,
        creator_amount=creator_amount,
        platform_amount=platform_amount,
        brand_amount=brand_amount,
        creator_id=creator_id,
        brand_id=brand_id,
        status=PayoutStatus.PENDING,
        created_at=utc_now(),
    )


def insert_payouts(payouts: List[Payout]) -> List[Payout]:
    """
    Insert one or more payouts in a single request.

    Raises:
        postgrest.exceptions.APIError: On constraint violations (a payout
            already exists for one of the orders)
    """

    if not payouts:
        return []

    payload = [_payout_to_row(payout) for payout in payouts]
    response = get_supabase().table(_PAYOUTS_TABLE).insert(payload).execute()

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to create payouts: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        return list(payouts)
    return [_row_to_payout(row) for row in rows]


def get_payout_by_order_id(order_id: UUID) -> Optional[Payout]:
    """
    Retrieve the payout for an order.

    Returns:
        Payout or None if the order has not been paid out yet
    """

    response = (
        get_supabase().table(_PAYOUTS_TABLE)
        .select("*")
        .eq("order_id", str(order_id))
        .limit(1)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to get payout: {error}")

    rows = getattr(response, "data", None) or []

    if not rows:
        return None

    return _row_to_payout(rows[0])


def list_paid_out_order_ids(order_ids: Iterable[UUID]) -> set[UUID]:
    """
    Return the subset of order_ids that already have a payout row.
    """

    ids = [str(order_id) for order_id in order_ids]
    paid_out: set[UUID] = set()

    # Batched so no single response reaches the per-request row cap.
    for start in range(0, len(ids), _ID_BATCH_SIZE):
        response = (
            get_supabase().table(_PAYOUTS_TABLE)
            .select("order_id")
            .in_("order_id", ids[start:start + _ID_BATCH_SIZE])
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to list payouts: {error}")

        rows = getattr(response, "data", None) or []
        paid_out.update(UUID(str(row["order_id"])) for row in rows)

    return paid_out


__all__ = [
    "new_pending_payout",
    "insert_payouts",
    "get_payout_by_order_id",
    "list_paid_out_order_ids",
]
