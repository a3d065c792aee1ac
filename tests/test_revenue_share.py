"""
Tests for `services/revenue_share.py`.

Covers contract rules:
- creator and platform amounts are floored, the brand receives the remainder.
- The three parts always sum to the gross amount.
- Identical inputs produce identical outputs.
- Rates outside [0, 1], or creator + platform above 1, are rejected.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

import pytest

from domain.product import Product
from services.errors import ValidationError
from services.revenue_share import RevenueShare, split, split_for_product


def test_split_default_rates_on_round_amount() -> None:
    """10000 at 25% / 15% splits exactly."""

    assert split(10000, "0.25", "0.15") == RevenueShare(
        creator_amount=2500,
        platform_amount=1500,
        brand_amount=6000,
        gross_amount=10000,
    )


def test_split_rounding_loss_goes_to_brand() -> None:
    """101 at 25% / 15%: 25.25 and 15.15 are floored, the brand keeps the rest."""

    share = split(101, Decimal("0.25"), Decimal("0.15"))

    assert share.creator_amount == 25
    assert share.platform_amount == 15
    assert share.brand_amount == 61


@pytest.mark.parametrize(
    "gross, creator_rate, platform_rate",
    [
        (1, "0.25", "0.15"),
        (7, "0.33", "0.33"),
        (999, "0.5", "0.5"),
        (12345, 0.1, 0.2),
        (100, "0.29", "0"),
        (3, "1", "0"),
    ],
)
def test_split_parts_sum_to_gross(gross: int, creator_rate, platform_rate) -> None:
    """Conservation: creator + platform + brand == gross, all non-negative."""

    share = split(gross, creator_rate, platform_rate)

    assert share.creator_amount + share.platform_amount + share.brand_amount == gross
    assert min(share.creator_amount, share.platform_amount, share.brand_amount) >= 0


def test_split_uses_exact_decimal_arithmetic() -> None:
    """100 * 0.29 is 29 exactly; a binary float product would floor to 28."""

    assert split(100, 0.29, 0).creator_amount == 29


def test_split_is_deterministic() -> None:
    """Same inputs, same result."""

    assert split(4321, "0.27", "0.11") == split(4321, "0.27", "0.11")


@pytest.mark.parametrize(
    "creator_rate, platform_rate",
    [
        ("-0.1", "0.15"),
        ("0.25", "1.5"),
        ("0.7", "0.4"),
        ("NaN", "0.1"),
    ],
)
def test_split_rejects_invalid_rates(creator_rate: str, platform_rate: str) -> None:
    with pytest.raises(ValidationError):
        split(10000, creator_rate, platform_rate)


def test_split_rejects_explicit_brand_rate_out_of_range() -> None:
    with pytest.raises(ValidationError):
        split(10000, "0.25", "0.15", brand_rate="1.2")


@pytest.mark.parametrize("gross", [0, -5, True, 10.5])
def test_split_rejects_non_positive_or_non_integer_gross(gross) -> None:
    with pytest.raises(ValidationError):
        split(gross, "0.25", "0.15")


def test_split_missing_rates_fall_back_to_defaults() -> None:
    """A rate stored as NULL means the platform default, not zero."""

    assert split(10000, None, None) == split(10000, "0.25", "0.15")


def test_split_for_product_uses_product_rates() -> None:
    product = Product(
        product_id=UUID("00000000-0000-0000-0000-000000000100"),
        owner_id=UUID("00000000-0000-0000-0000-000000000200"),
        name="Serum",
        price=5000,
        creator_share_rate=Decimal("0.30"),
        platform_take_rate=Decimal("0.10"),
    )

    share = split_for_product(5000, product)

    assert (share.creator_amount, share.platform_amount, share.brand_amount) == (1500, 500, 3000)


def test_split_for_missing_product_uses_defaults() -> None:
    share = split_for_product(10000, None)

    assert (share.creator_amount, share.platform_amount, share.brand_amount) == (2500, 1500, 6000)
