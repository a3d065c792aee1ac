"""
Fraud flag repository (persistence).

Flags are append-only from the pipeline's point of view.
"""

from __future__ import annotations

from typing import Any, List, Mapping
from uuid import UUID

from domain.fraud import FraudFlag, FraudSeverity
from domain.time import parse_utc_datetime
from repositories.client import get_supabase

_FRAUD_FLAGS_TABLE: str = "fraud_flags"


def _row_to_flag(row: Mapping[str, Any]) -> FraudFlag:
    creator_id = row.get("creator_id")
    brand_id = row.get("brand_id")
    flag_id = row.get("id")
    return FraudFlag(
        order_id=UUID(str(row["order_id"])),
        reason=str(row["reason"]),
        severity=FraudSeverity(str(row["severity"])),
        creator_id=UUID(str(creator_id)) if creator_id else None,
        brand_id=UUID(str(brand_id)) if brand_id else None,
        reviewed=bool(row.get("reviewed", False)),
        note=row.get("note"),
        flag_id=UUID(str(flag_id)) if flag_id else None,
        created_at=parse_utc_datetime(row["created_at"]) if row.get("created_at") else None,
    )


def insert_fraud_flags(flags: List[FraudFlag]) -> List[FraudFlag]:
    """
    Insert fraud flags for human review.

    Args:
        flags: Flags produced by the fraud rule engine

    Returns:
        The persisted flags (with ids when the store returns them)
    """

    if not flags:
        return []

    payload = [
        {
            "order_id": str(flag.order_id),
            "creator_id": str(flag.creator_id) if flag.creator_id else None,
            "brand_id": str(flag.brand_id) if flag.brand_id else None,
            "reason": flag.reason,
            "severity": flag.severity.value,
            "reviewed": flag.reviewed,
            "note": flag.note,
        }
        for flag in flags
    ]

    response = get_supabase().table(_FRAUD_FLAGS_TABLE).insert(payload).execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to record fraud flags: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        return list(flags)
    return [_row_to_flag(row) for row in rows]


__all__ = ["insert_fraud_flags"]
