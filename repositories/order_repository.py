"""
Order repository (persistence).

This module provides *only* persistence operations for the Order domain
entity. It does not enforce business rules (idempotency, authorization);
those live in the ingestion services. Unique-constraint violations raised by
PostgREST on insert are propagated unchanged so callers can treat them as an
idempotency signal.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.order import Order, OrderSource, OrderStatus
from domain.time import parse_utc_datetime, to_iso_utc, utc_now
from repositories.client import get_supabase

# Supabase table name for orders.
# Keep this aligned with your database schema.
_ORDERS_TABLE: str = "orders"

# Supabase returns at most this many rows per request.
_PAGE_SIZE: int = 1000


def _optional_uuid(value: Any) -> Optional[UUID]:
    return UUID(str(value)) if value else None


def _row_to_order(row: Mapping[str, Any]) -> Order:
    """Convert a Supabase row into an Order."""

    source = row.get("source")
    return Order(
        order_id=UUID(str(row["id"])),
        product_id=UUID(str(row["product_id"])),
        amount=int(row["amount"]),
        status=OrderStatus(str(row["status"])),
        created_at=parse_utc_datetime(row["created_at"]),
        creator_id=_optional_uuid(row.get("creator_id")),
        payment_session_id=row.get("stripe_session_id"),
        affiliate_link_id=_optional_uuid(row.get("affiliate_link_id")),
        source=OrderSource(source) if source in {s.value for s in OrderSource} else None,
        payment_intent_id=row.get("payment_intent_id"),
        product_name=row.get("product_name"),
        unit_price=int(row["price"]) if row.get("price") is not None else None,
        idempotency_key=row.get("idempotency_key"),
        client_ip=row.get("client_ip"),
    )


def _rows(response: Any, action: str) -> List[Mapping[str, Any]]:
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to {action}: {error}")
    return getattr(response, "data", None) or []


def insert_order(
    product_id: UUID,
    amount: int,
    creator_id: Optional[UUID] = None,
    status: OrderStatus = OrderStatus.COMPLETED,
    source: OrderSource = OrderSource.DIRECT,
    payment_session_id: Optional[str] = None,
    affiliate_link_id: Optional[UUID] = None,
    payment_intent_id: Optional[str] = None,
    product_name: Optional[str] = None,
    unit_price: Optional[int] = None,
    idempotency_key: Optional[str] = None,
    client_ip: Optional[str] = None,
) -> Order:
    """
    Insert a new order into Supabase.

    Args:
        product_id: Product being purchased
        amount: Gross amount in the smallest currency unit
        creator_id: Attributed creator (None when unattributed)
        status: Order status (default: completed)
        source: Ingestion path that created the order
        payment_session_id: Checkout session id (unique when present)
        affiliate_link_id: Referral link the purchase came through
        payment_intent_id: Payment processor's payment intent id
        product_name: Product name at time of purchase
        unit_price: Product list price at time of purchase
        idempotency_key: Caller-supplied key for direct creation (unique)
        client_ip: Network origin of a direct creation request

    Returns:
        Order domain model with the recorded order

    Raises:
        postgrest.exceptions.APIError: On constraint violations (e.g. a
            duplicate stripe_session_id); see repositories.client.is_unique_violation
    """

    order_id = uuid4()
    now = utc_now()

    payload: dict[str, Any] = {
        "id": str(order_id),
        "product_id": str(product_id),
        "creator_id": str(creator_id) if creator_id else None,
        "amount": amount,
        "status": status.value,
        "source": source.value,
        "stripe_session_id": payment_session_id,
        "affiliate_link_id": str(affiliate_link_id) if affiliate_link_id else None,
        "payment_intent_id": payment_intent_id,
        "product_name": product_name,
        "price": unit_price,
        "idempotency_key": idempotency_key,
        "client_ip": client_ip,
        "created_at": to_iso_utc(now, name="created_at"),
    }

    response = get_supabase().table(_ORDERS_TABLE).insert(payload).execute()
    rows = _rows(response, "create order")

    return _row_to_order(rows[0] if rows else payload)


def _get_single(column: str, value: str) -> Optional[Order]:
    response = (
        get_supabase().table(_ORDERS_TABLE)
        .select("*")
        .eq(column, value)
        .limit(1)
        .execute()
    )
    rows = _rows(response, "get order")

    if not rows:
        return None

    return _row_to_order(rows[0])


def get_order_by_id(order_id: UUID) -> Optional[Order]:
    """
    Retrieve a single order by its ID.

    Returns:
        Order or None if not found
    """

    return _get_single("id", str(order_id))


def get_order_by_session_id(payment_session_id: str) -> Optional[Order]:
    """
    Retrieve the order recorded for a checkout session, if any.

    Used by payment confirmation ingestion as its idempotency lookup.
    """

    return _get_single("stripe_session_id", payment_session_id)


def get_order_by_idempotency_key(idempotency_key: str) -> Optional[Order]:
    """Retrieve the order recorded for a direct-creation idempotency key."""

    return _get_single("idempotency_key", idempotency_key)


def _count(response: Any, action: str) -> int:
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to {action}: {error}")
    return getattr(response, "count", 0) or 0


def _select_all(build_query: Callable[..., Any], columns: str, action: str) -> List[Mapping[str, Any]]:
    """
    Read every row matched by build_query, one page at a time.

    Supabase caps each response at _PAGE_SIZE rows, so the total is taken
    first with count="exact" and the rows are then fetched by range. Pages
    are ordered by id so that offsets stay stable between requests.
    """

    total_count = _count(build_query("id", count="exact").limit(1).execute(), action)

    all_rows: List[Mapping[str, Any]] = []
    offset = 0

    while offset < total_count:
        response_page = (
            build_query(columns)
            .order("id")
            .range(offset, offset + _PAGE_SIZE - 1)
            .execute()
        )
        page_rows = _rows(response_page, action)
        if not page_rows:
            break

        all_rows.extend(page_rows)
        offset += _PAGE_SIZE

    return all_rows


def _completed_orders_query(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Callable[..., Any]:
    def build(columns: str, count: Optional[str] = None) -> Any:
        query = (
            get_supabase().table(_ORDERS_TABLE)
            .select(columns, count=count)
            .eq("status", OrderStatus.COMPLETED.value)
        )
        if start is not None:
            query = query.gte("created_at", to_iso_utc(start, name="start"))
        if end is not None:
            query = query.lte("created_at", to_iso_utc(end, name="end"))
        return query

    return build


def list_completed_orders(order_id: Optional[UUID] = None) -> List[Order]:
    """
    Retrieve completed orders, optionally restricted to a single order.

    Args:
        order_id: When given, only this order is returned (if completed)

    Returns:
        List[Order] (possibly empty)
    """

    completed = _completed_orders_query()

    def build(columns: str, count: Optional[str] = None) -> Any:
        query = completed(columns, count)
        if order_id is not None:
            query = query.eq("id", str(order_id))
        return query

    rows = _select_all(build, "*", "list orders")
    return [_row_to_order(row) for row in rows]


def list_completed_orders_between(
    start: datetime,
    end: datetime,
    product_id: Optional[UUID] = None,
) -> List[Order]:
    """
    Retrieve completed orders created within [start, end].

    Args:
        start: Inclusive lower bound (UTC)
        end: Inclusive upper bound (UTC)
        product_id: Optional product scope

    Returns:
        List[Order] ordered by creation time (ties by id)
    """

    completed = _completed_orders_query(start, end)

    def build(columns: str, count: Optional[str] = None) -> Any:
        query = completed(columns, count)
        if product_id is not None:
            query = query.eq("product_id", str(product_id))
        return query

    orders = [_row_to_order(row) for row in _select_all(build, "*", "list orders")]
    # Pages arrive in id order; the sort is stable so equal timestamps keep it.
    orders.sort(key=lambda order: order.created_at)
    return orders


def count_completed_orders(
    *,
    start: datetime,
    end: datetime,
    creator_id: Optional[UUID] = None,
    client_ip: Optional[str] = None,
) -> int:
    """
    Count completed orders created within [start, end] for a creator or origin.

    Exactly one of creator_id / client_ip is expected.
    """

    query = _completed_orders_query(start, end)("id", count="exact")
    if creator_id is not None:
        query = query.eq("creator_id", str(creator_id))
    if client_ip is not None:
        query = query.eq("client_ip", client_ip)

    return _count(query.limit(1).execute(), "count orders")


def get_average_completed_amount() -> Optional[Decimal]:
    """
    Average gross amount over all completed orders.

    Returns:
        Decimal average, or None when there are no completed orders yet
    """

    rows = _select_all(_completed_orders_query(), "amount", "list order amounts")

    if not rows:
        return None

    total = sum(int(row.get("amount") or 0) for row in rows)
    return Decimal(total) / Decimal(len(rows))


__all__ = [
    "insert_order",
    "get_order_by_id",
    "get_order_by_session_id",
    "get_order_by_idempotency_key",
    "list_completed_orders",
    "list_completed_orders_between",
    "count_completed_orders",
    "get_average_completed_amount",
]
