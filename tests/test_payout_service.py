"""
Tests for `services/payout_service.py`.

Covers contract rules:
- At most one payout per order; repeated runs are no-ops.
- Splits use each product's rates (defaults when the product is gone).
- An invalid rate configuration aborts the batch before anything is written.
- A bulk insert racing another run falls back to per-order inserts.
- Batches larger than one store page are settled in full.
"""

from __future__ import annotations

from uuid import UUID

import pytest

import services.payout_service as payout_service
from domain.order import Order
from repositories.order_repository import get_order_by_id
from services.errors import ValidationError
from services.payout_service import generate_payout_for_order, generate_payouts

PRODUCT_ID = "00000000-0000-0000-0000-000000000100"
CUSTOM_PRODUCT_ID = "00000000-0000-0000-0000-000000000101"
BRAND_ID = "00000000-0000-0000-0000-0000000000b1"
CREATOR_ID = "00000000-0000-0000-0000-0000000000c1"


def seed_order(fake_db, order_id: int, amount: int, product_id: str = PRODUCT_ID, status: str = "completed") -> str:
    row_id = str(UUID(int=order_id))
    fake_db.seed(
        "orders",
        {
            "id": row_id,
            "product_id": product_id,
            "creator_id": CREATOR_ID,
            "amount": amount,
            "status": status,
            "source": "direct",
        },
    )
    return row_id


@pytest.fixture
def catalog(fake_db):
    fake_db.seed(
        "products",
        {"id": PRODUCT_ID, "owner_id": BRAND_ID, "name": "Serum", "price": 10000, "status": "active"},
        {
            "id": CUSTOM_PRODUCT_ID,
            "owner_id": BRAND_ID,
            "name": "Toner",
            "price": 5000,
            "status": "active",
            "creator_share_rate": "0.30",
            "platform_take_rate": "0.10",
        },
    )
    return fake_db


def load_order(row_id: str) -> Order:
    order = get_order_by_id(UUID(row_id))
    assert order is not None
    return order


def test_no_orders(catalog) -> None:
    result = generate_payouts()

    assert result.generated == 0
    assert result.message == "No orders to process"


def test_generates_one_payout_per_completed_order(catalog) -> None:
    seed_order(catalog, 1, 10000)
    seed_order(catalog, 2, 5000, product_id=CUSTOM_PRODUCT_ID)
    seed_order(catalog, 3, 7000, status="refunded")

    result = generate_payouts()

    assert result.generated == 2
    assert result.message == "Generated 2 payouts"
    by_order = {row["order_id"]: row for row in catalog.rows("payouts")}
    assert set(by_order) == {str(UUID(int=1)), str(UUID(int=2))}

    default_split = by_order[str(UUID(int=1))]
    assert (default_split["creator_amount"], default_split["platform_amount"], default_split["brand_amount"]) == (2500, 1500, 6000)
    assert default_split["brand_id"] == BRAND_ID
    assert default_split["status"] == "pending"

    custom_split = by_order[str(UUID(int=2))]
    assert (custom_split["creator_amount"], custom_split["platform_amount"], custom_split["brand_amount"]) == (1500, 500, 3000)


def test_second_run_is_a_no_op(catalog) -> None:
    seed_order(catalog, 1, 10000)
    generate_payouts()

    result = generate_payouts()

    assert result.generated == 0
    assert result.message == "All orders already have payouts"
    assert len(catalog.rows("payouts")) == 1


def test_single_order_run(catalog) -> None:
    seed_order(catalog, 1, 10000)
    target = seed_order(catalog, 2, 2000)

    result = generate_payouts(UUID(target))

    assert result.generated == 1
    assert [row["order_id"] for row in catalog.rows("payouts")] == [target]


def test_missing_product_uses_default_rates(catalog) -> None:
    seed_order(catalog, 1, 10000, product_id=str(UUID(int=404)))

    [payout] = generate_payouts().payouts

    assert (payout.creator_amount, payout.platform_amount, payout.brand_amount) == (2500, 1500, 6000)
    assert payout.brand_id is None


def test_invalid_rates_abort_batch_before_writing(catalog) -> None:
    broken_product = "00000000-0000-0000-0000-000000000102"
    catalog.seed(
        "products",
        {
            "id": broken_product,
            "owner_id": BRAND_ID,
            "name": "Broken",
            "price": 100,
            "status": "active",
            "creator_share_rate": "0.7",
            "platform_take_rate": "0.4",
        },
    )
    seed_order(catalog, 1, 10000)
    seed_order(catalog, 2, 10000, product_id=broken_product)

    with pytest.raises(ValidationError):
        generate_payouts()

    assert catalog.rows("payouts") == []


def test_out_of_range_stored_rate_is_a_validation_error(catalog) -> None:
    overpaid_product = "00000000-0000-0000-0000-000000000103"
    catalog.seed(
        "products",
        {
            "id": overpaid_product,
            "owner_id": BRAND_ID,
            "name": "Overpaid",
            "price": 100,
            "status": "active",
            "creator_share_rate": "1.5",
        },
    )
    seed_order(catalog, 1, 10000, product_id=overpaid_product)

    with pytest.raises(ValidationError, match="creator_rate"):
        generate_payouts()

    assert catalog.rows("payouts") == []


def test_dry_run_writes_nothing(catalog) -> None:
    seed_order(catalog, 1, 10000)

    result = generate_payouts(dry_run=True)

    assert result.generated == 1
    assert result.message == "Would generate 1 payouts"
    assert catalog.rows("payouts") == []


def test_bulk_insert_race_falls_back_to_per_order(catalog, monkeypatch) -> None:
    """Another run paid out order 1 between the lookup and the insert."""

    first = seed_order(catalog, 1, 10000)
    second = seed_order(catalog, 2, 4000)
    generate_payouts(UUID(first))
    monkeypatch.setattr(payout_service, "list_paid_out_order_ids", lambda order_ids: set())

    result = generate_payouts()

    assert result.generated == 1
    assert [payout.order_id for payout in result.payouts] == [UUID(second)]
    assert sorted(row["order_id"] for row in catalog.rows("payouts")) == sorted([first, second])


def test_generate_payout_for_order_is_idempotent(catalog) -> None:
    order = load_order(seed_order(catalog, 1, 101))

    first = generate_payout_for_order(order, brand_id=UUID(BRAND_ID), creator_rate="0.25", platform_rate="0.15")
    second = generate_payout_for_order(order, brand_id=UUID(BRAND_ID), creator_rate="0.5", platform_rate="0.5")

    assert second.payout_id == first.payout_id
    assert (second.creator_amount, second.platform_amount, second.brand_amount) == (25, 15, 61)
    assert len(catalog.rows("payouts")) == 1


def test_generate_payout_for_order_race(catalog, monkeypatch) -> None:
    order = load_order(seed_order(catalog, 1, 10000))
    existing = generate_payout_for_order(order, brand_id=None, creator_rate="0.25", platform_rate="0.15")

    real_lookup = payout_service.get_payout_by_order_id
    calls = []

    def stale_then_real(order_id):
        calls.append(order_id)
        return None if len(calls) == 1 else real_lookup(order_id)

    monkeypatch.setattr(payout_service, "get_payout_by_order_id", stale_then_real)

    again = generate_payout_for_order(order, brand_id=None, creator_rate="0.25", platform_rate="0.15")

    assert again.payout_id == existing.payout_id
    assert len(catalog.rows("payouts")) == 1


def test_batch_settles_more_orders_than_one_page(catalog) -> None:
    catalog.seed(
        "orders",
        *(
            {
                "id": str(UUID(int=order_id)),
                "product_id": PRODUCT_ID,
                "creator_id": CREATOR_ID,
                "amount": 1000,
                "status": "completed",
                "source": "direct",
            }
            for order_id in range(1, 1201)
        ),
    )

    assert generate_payouts().generated == 1200
    assert generate_payouts().generated == 0
    assert len(catalog.rows("payouts")) == 1200
