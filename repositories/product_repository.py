"""
Product repository for reading listed products and their revenue-share rates.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional
from uuid import UUID

from domain.product import (
    DEFAULT_CREATOR_SHARE_RATE,
    DEFAULT_PLATFORM_TAKE_RATE,
    Product,
    ProductStatus,
    to_rate,
)
from repositories.client import get_supabase

_PRODUCTS_TABLE: str = "products"

# Product ids per IN (...) lookup.
_ID_BATCH_SIZE: int = 250


def _row_to_product(row: Mapping[str, Any]) -> Product:
    owner_id = row.get("owner_id")
    return Product(
        product_id=UUID(str(row["id"])),
        owner_id=UUID(str(owner_id)) if owner_id else None,
        name=str(row.get("name") or ""),
        price=int(row.get("price") or 0),
        status=ProductStatus(str(row.get("status") or ProductStatus.ACTIVE.value)),
        creator_share_rate=to_rate(row.get("creator_share_rate"), DEFAULT_CREATOR_SHARE_RATE),
        platform_take_rate=to_rate(row.get("platform_take_rate"), DEFAULT_PLATFORM_TAKE_RATE),
        image_url=row.get("image_url") or None,
    )


def get_product_by_id(product_id: UUID) -> Optional[Product]:
    """
    Get a product by its ID.

    Args:
        product_id: UUID of the product

    Returns:
        Product domain model or None if not found

    Example:
        product = get_product_by_id(UUID('12345678-1234-1234-1234-123456789012'))
        if product and product.is_active():
            # Product can be sold
    """
    response = (
        get_supabase().table(_PRODUCTS_TABLE)
        .select("*")
        .eq("id", str(product_id))
        .limit(1)
        .execute()
    )

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch product: {error}")

    rows = getattr(response, "data", None) or []

    if not rows:
        return None

    return _row_to_product(rows[0])


def get_products_by_ids(product_ids: Iterable[UUID]) -> dict[UUID, Product]:
    """
    Get several products, fetched in batches of ids.

    Returns:
        Dictionary mapping product_id to Product (missing ids are absent)
    """
    ids = sorted({str(product_id) for product_id in product_ids})
    products: dict[UUID, Product] = {}

    for start in range(0, len(ids), _ID_BATCH_SIZE):
        response = (
            get_supabase().table(_PRODUCTS_TABLE)
            .select("*")
            .in_("id", ids[start:start + _ID_BATCH_SIZE])
            .execute()
        )

        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to fetch products: {error}")

        rows = getattr(response, "data", None) or []
        for product in (_row_to_product(row) for row in rows):
            products[product.product_id] = product

    return products


__all__ = ["get_product_by_id", "get_products_by_ids"]
