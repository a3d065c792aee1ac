"""
Affiliate link repository for resolving and issuing referral codes.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional
from uuid import UUID, uuid4

from domain.affiliate import AffiliateLink
from domain.time import parse_utc_datetime, to_iso_utc, utc_now
from repositories.client import get_supabase

_AFFILIATE_LINKS_TABLE: str = "affiliate_links"

# Link ids per IN (...) lookup.
_ID_BATCH_SIZE: int = 250


def _row_to_link(row: Mapping[str, Any]) -> AffiliateLink:
    return AffiliateLink(
        link_id=UUID(str(row["id"])),
        product_id=UUID(str(row["product_id"])),
        creator_id=UUID(str(row["creator_id"])),
        affiliate_code=str(row["affiliate_code"]),
        status=str(row.get("status") or "active"),
        created_at=parse_utc_datetime(row["created_at"]) if row.get("created_at") else None,
    )


def _first_link(query: Any) -> Optional[AffiliateLink]:
    response = query.limit(1).execute()

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch affiliate link: {error}")

    rows = getattr(response, "data", None) or []

    if not rows:
        return None

    return _row_to_link(rows[0])


def get_active_link_by_code(affiliate_code: str, product_id: UUID) -> Optional[AffiliateLink]:
    """
    Resolve an affiliate code for a product.

    Only active links bound to the same product resolve; a code for a
    different product is treated as absent.

    Args:
        affiliate_code: Referral code from the purchase URL
        product_id: Product being purchased

    Returns:
        AffiliateLink or None
    """
    query = (
        get_supabase().table(_AFFILIATE_LINKS_TABLE)
        .select("*")
        .eq("affiliate_code", affiliate_code)
        .eq("product_id", str(product_id))
        .eq("status", "active")
    )
    return _first_link(query)


def get_active_link_for_creator(product_id: UUID, creator_id: UUID) -> Optional[AffiliateLink]:
    """Return the creator's active link for a product, if one was issued."""

    query = (
        get_supabase().table(_AFFILIATE_LINKS_TABLE)
        .select("*")
        .eq("product_id", str(product_id))
        .eq("creator_id", str(creator_id))
        .eq("status", "active")
    )
    return _first_link(query)


def affiliate_code_exists(affiliate_code: str) -> bool:
    """Check whether a code is already taken by any link (any status)."""

    query = (
        get_supabase().table(_AFFILIATE_LINKS_TABLE)
        .select("*")
        .eq("affiliate_code", affiliate_code)
    )
    return _first_link(query) is not None


def insert_affiliate_link(product_id: UUID, creator_id: UUID, affiliate_code: str) -> AffiliateLink:
    """
    Insert a new active affiliate link.

    Returns:
        The created AffiliateLink
    """
    link_id = uuid4()
    now = utc_now()

    payload = {
        "id": str(link_id),
        "product_id": str(product_id),
        "creator_id": str(creator_id),
        "affiliate_code": affiliate_code,
        "status": "active",
        "created_at": to_iso_utc(now, name="created_at"),
    }

    response = get_supabase().table(_AFFILIATE_LINKS_TABLE).insert(payload).execute()

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to create affiliate link: {error}")

    return AffiliateLink(
        link_id=link_id,
        product_id=product_id,
        creator_id=creator_id,
        affiliate_code=affiliate_code,
        status="active",
        created_at=now,
    )


def get_link_creator_ids(link_ids: Iterable[UUID]) -> Dict[UUID, UUID]:
    """
    Map affiliate link ids to the creators that own them.

    Links of any status resolve, so sales made through a since-disabled link
    stay attributed. Unknown ids are absent from the result.
    """
    ids = sorted({str(link_id) for link_id in link_ids})
    creators: Dict[UUID, UUID] = {}

    for start in range(0, len(ids), _ID_BATCH_SIZE):
        response = (
            get_supabase().table(_AFFILIATE_LINKS_TABLE)
            .select("id, creator_id")
            .in_("id", ids[start:start + _ID_BATCH_SIZE])
            .execute()
        )

        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to fetch affiliate links: {error}")

        for row in getattr(response, "data", None) or []:
            creators[UUID(str(row["id"]))] = UUID(str(row["creator_id"]))

    return creators


__all__ = [
    "get_active_link_by_code",
    "get_active_link_for_creator",
    "affiliate_code_exists",
    "insert_affiliate_link",
    "get_link_creator_ids",
]
