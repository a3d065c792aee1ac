"""
Domain: Product (sale unit listed by a brand).

Each product carries its own revenue-share rates. When the store holds no
rate for a product the platform defaults apply: creator 25%, platform 15%,
leaving 60% for the brand.

Stored rates are carried as-is; the revenue-share calculator rejects rates
outside [0, 1] when a split is taken.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from uuid import UUID

DEFAULT_CREATOR_SHARE_RATE = Decimal("0.25")
DEFAULT_PLATFORM_TAKE_RATE = Decimal("0.15")

RateLike = Union[Decimal, float, int, str]


class ProductStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def to_rate(value: Optional[RateLike], default: Decimal) -> Decimal:
    """
    Convert a stored or transmitted rate to an exact Decimal.

    Floats go through str() so that 0.15 becomes Decimal("0.15") rather than
    its binary approximation. None and empty strings fall back to the default.
    """

    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True, slots=True)
class Product:
    product_id: UUID
    owner_id: Optional[UUID]
    name: str
    price: int
    status: ProductStatus = ProductStatus.ACTIVE
    creator_share_rate: Decimal = DEFAULT_CREATOR_SHARE_RATE
    platform_take_rate: Decimal = DEFAULT_PLATFORM_TAKE_RATE
    image_url: Optional[str] = None

    def is_active(self) -> bool:
        return self.status is ProductStatus.ACTIVE
