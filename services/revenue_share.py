"""
Revenue-share calculator.

Splits the gross amount of a sale between creator, platform and brand:

- creator_amount  = floor(gross * creator_rate)
- platform_amount = floor(gross * platform_rate)
- brand_amount    = gross - creator_amount - platform_amount

The brand receives the remainder, so all rounding loss lands with the brand
and the three parts always sum to gross exactly. Rates are handled as
Decimal so the floor is taken over the exact product, not a binary float
approximation (100 * 0.29 must give 29, not 28).

The function is pure: identical inputs always produce identical outputs,
which payout auditing relies on.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Optional

from domain.product import (
    DEFAULT_CREATOR_SHARE_RATE,
    DEFAULT_PLATFORM_TAKE_RATE,
    Product,
    RateLike,
    to_rate,
)
from services.errors import ValidationError


@dataclass(frozen=True, slots=True)
class RevenueShare:
    """Result of a three-way split. Parts sum to gross_amount."""

    creator_amount: int
    platform_amount: int
    brand_amount: int
    gross_amount: int


def _floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def _require_rate(name: str, rate: Decimal) -> None:
    if not rate.is_finite() or rate < 0 or rate > 1:
        raise ValidationError(f"{name} must be between 0 and 1")


def split(
    gross_amount: int,
    creator_rate: RateLike,
    platform_rate: RateLike,
    brand_rate: Optional[RateLike] = None,
) -> RevenueShare:
    """
    Split a gross amount between creator, platform and brand.

    Args:
        gross_amount: Sale amount in the smallest currency unit (must be > 0)
        creator_rate: Creator share in [0, 1]
        platform_rate: Platform take in [0, 1]
        brand_rate: Optional explicit brand rate; defaults to
            1 - creator_rate - platform_rate. Only validated, the brand
            amount is always the remainder.

    Returns:
        RevenueShare

    Raises:
        ValidationError: If gross is not a positive integer, or any
            effective rate falls outside [0, 1]

    Example:
        split(10000, "0.25", "0.15")
        # RevenueShare(creator_amount=2500, platform_amount=1500, brand_amount=6000, gross_amount=10000)
    """
    if isinstance(gross_amount, bool) or not isinstance(gross_amount, int):
        raise ValidationError("gross_amount must be an integer amount in the smallest currency unit")
    if gross_amount <= 0:
        raise ValidationError("gross_amount must be greater than 0")

    try:
        creator = to_rate(creator_rate, DEFAULT_CREATOR_SHARE_RATE)
        platform = to_rate(platform_rate, DEFAULT_PLATFORM_TAKE_RATE)
        brand = None if brand_rate is None else to_rate(brand_rate, Decimal(0))
    except ArithmeticError as exc:
        raise ValidationError(f"Invalid rate: {exc}") from exc

    _require_rate("creator_rate", creator)
    _require_rate("platform_rate", platform)

    effective_brand_rate = brand if brand is not None else Decimal(1) - creator - platform
    if not effective_brand_rate.is_finite() or effective_brand_rate < 0 or effective_brand_rate > 1:
        raise ValidationError(
            f"Invalid brand rate: {effective_brand_rate}. "
            "creator_rate + platform_rate must be <= 1"
        )

    creator_amount = _floor(gross_amount * creator)
    platform_amount = _floor(gross_amount * platform)
    brand_amount = gross_amount - creator_amount - platform_amount

    return RevenueShare(
        creator_amount=creator_amount,
        platform_amount=platform_amount,
        brand_amount=brand_amount,
        gross_amount=gross_amount,
    )


def split_for_product(gross_amount: int, product: Optional[Product]) -> RevenueShare:
    """
    Split using a product's configured rates.

    A missing product (deleted since the sale) falls back to the platform
    default rates: creator 25%, platform 15%.
    """
    if product is None:
        return split(gross_amount, DEFAULT_CREATOR_SHARE_RATE, DEFAULT_PLATFORM_TAKE_RATE)
    return split(gross_amount, product.creator_share_rate, product.platform_take_rate)


__all__ = ["RevenueShare", "split", "split_for_product"]
