"""
Tests for the settlement domain entities.

Covers contract rules:
- Order amounts are positive integers; created_at is UTC.
- Payout parts must sum to the gross amount.
- Product rates stay within [0, 1]; missing rates use the platform defaults.
- Tournament windows are well-formed and inclusive.
- Entities are immutable (frozen).
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from domain.actor import Actor
from domain.order import Order, OrderStatus, require_positive_amount
from domain.payout import Payout
from domain.product import DEFAULT_CREATOR_SHARE_RATE, Product, to_rate
from domain.tournament import Tournament, TournamentStatus

ORDER_ID = UUID("00000000-0000-0000-0000-000000000001")
PRODUCT_ID = UUID("00000000-0000-0000-0000-000000000100")
NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("amount", [0, -1, 1.5, "100", True, None])
def test_order_amount_must_be_positive_integer(amount) -> None:
    with pytest.raises(ValueError):
        require_positive_amount("amount", amount)


def test_order_created_at_must_be_utc() -> None:
    """Naive and non-UTC timestamps are rejected."""

    with pytest.raises(ValueError):
        Order(ORDER_ID, PRODUCT_ID, 100, OrderStatus.COMPLETED, datetime(2025, 1, 1))

    with pytest.raises(ValueError):
        Order(
            ORDER_ID,
            PRODUCT_ID,
            100,
            OrderStatus.COMPLETED,
            datetime(2025, 1, 1, tzinfo=timezone(timedelta(hours=2))),
        )


def test_order_is_immutable() -> None:
    order = Order(ORDER_ID, PRODUCT_ID, 100, OrderStatus.COMPLETED, NOW)

    assert order.is_completed is True
    with pytest.raises(FrozenInstanceError):
        order.amount = 200  # type: ignore[misc]


def test_payout_parts_must_sum_to_gross() -> None:
    Payout(UUID(int=1), ORDER_ID, 10000, 2500, 1500, 6000)

    with pytest.raises(ValueError):
        Payout(UUID(int=1), ORDER_ID, 10000, 2500, 1500, 5999)


def test_product_keeps_stored_rates_unchecked() -> None:
    product = Product(PRODUCT_ID, None, "Serum", 100, creator_share_rate=Decimal("1.1"))

    assert product.creator_share_rate == Decimal("1.1")


def test_to_rate_defaults_and_exactness() -> None:
    assert to_rate(None, DEFAULT_CREATOR_SHARE_RATE) == Decimal("0.25")
    assert to_rate("", DEFAULT_CREATOR_SHARE_RATE) == Decimal("0.25")
    assert to_rate(0.15, DEFAULT_CREATOR_SHARE_RATE) == Decimal("0.15")
    assert to_rate(0, DEFAULT_CREATOR_SHARE_RATE) == Decimal("0")


def test_tournament_window() -> None:
    tournament = Tournament(
        tournament_id=UUID(int=9),
        slug="s",
        title="S",
        status=TournamentStatus.LIVE,
        start_at=NOW,
        end_at=NOW + timedelta(days=1),
    )

    assert tournament.contains(NOW)
    assert tournament.contains(NOW + timedelta(days=1))
    assert not tournament.contains(NOW - timedelta(microseconds=1))

    with pytest.raises(ValueError):
        Tournament(
            tournament_id=UUID(int=9),
            slug="s",
            title="S",
            status=TournamentStatus.LIVE,
            start_at=NOW,
            end_at=NOW - timedelta(seconds=1),
        )


@pytest.mark.parametrize(
    "role, creator, admin",
    [
        ("creator", True, False),
        ("influencer", True, False),
        ("brand", False, False),
        ("admin", False, True),
        (None, False, False),
    ],
)
def test_actor_capabilities(role, creator: bool, admin: bool) -> None:
    actor = Actor(actor_id=UUID(int=5), role=role)

    assert actor.can_create_orders() is creator
    assert actor.is_admin() is admin
