"""
Tournament repository (read-only).

Tournaments are created and advanced by administrators elsewhere; the
arena endpoints only read them.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import UUID

from domain.time import parse_utc_datetime
from domain.tournament import Tournament, TournamentStatus
from repositories.client import get_supabase

_TOURNAMENTS_TABLE: str = "tournaments"


def _row_to_tournament(row: Mapping[str, Any]) -> Tournament:
    product_id = row.get("product_id")
    created_by = row.get("created_by")
    return Tournament(
        tournament_id=UUID(str(row["id"])),
        slug=str(row["slug"]),
        title=str(row.get("title") or ""),
        status=TournamentStatus(str(row["status"])),
        start_at=parse_utc_datetime(row["start_at"]),
        end_at=parse_utc_datetime(row["end_at"]),
        product_id=UUID(str(product_id)) if product_id else None,
        description=row.get("description"),
        created_by=UUID(str(created_by)) if created_by else None,
        created_at=parse_utc_datetime(row["created_at"]) if row.get("created_at") else None,
        updated_at=parse_utc_datetime(row["updated_at"]) if row.get("updated_at") else None,
    )


def get_tournament_by_slug(slug: str) -> Optional[Tournament]:
    """
    Retrieve a tournament by its URL slug.

    Returns:
        Tournament or None if not found
    """

    response = (
        get_supabase().table(_TOURNAMENTS_TABLE)
        .select("*")
        .eq("slug", slug)
        .limit(1)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to get tournament: {error}")

    rows = getattr(response, "data", None) or []

    if not rows:
        return None

    return _row_to_tournament(rows[0])


def list_tournaments(
    status: Optional[TournamentStatus] = None,
    product_id: Optional[UUID] = None,
) -> List[Tournament]:
    """
    List tournaments, most recently started first.

    Args:
        status: Only tournaments in this status
        product_id: Only tournaments scoped to this product

    Returns:
        List[Tournament] (possibly empty)
    """

    query = get_supabase().table(_TOURNAMENTS_TABLE).select("*")
    if status is not None:
        query = query.eq("status", status.value)
    if product_id is not None:
        query = query.eq("product_id", str(product_id))

    response = query.order("start_at", desc=True).execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list tournaments: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_tournament(row) for row in rows]


__all__ = ["get_tournament_by_slug", "list_tournaments"]
