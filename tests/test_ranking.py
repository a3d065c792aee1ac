"""
Tests for tournament ranking in `services/ranking_service.py`.

Covers contract rules:
- Only completed, attributed orders inside [start_at, end_at] count.
- Product-scoped tournaments only count that product.
- Rows are sorted by revenue descending; ranks are 1..n with no gaps.
- Ties keep aggregation (first-seen) order and get consecutive ranks.
- The all-time ranking credits orders to the owner of their affiliate link.
- Tournament listing and detail require a signed-in caller.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Optional
from uuid import UUID

import pytest

from domain.actor import Actor
from domain.order import Order, OrderStatus
from domain.tournament import Tournament, TournamentStatus
from services.errors import AuthenticationError, NotFoundError, ValidationError
from services.ranking_service import (
    build_creator_ranking,
    build_tournament_ranking,
    get_creator_rankings,
    get_tournament_detail,
    get_tournament_leaderboard,
    get_user_rank,
    list_arena_tournaments,
)

START = datetime(2025, 3, 1, tzinfo=timezone.utc)
END = datetime(2025, 3, 31, 23, 59, 59, tzinfo=timezone.utc)
PRODUCT = UUID("00000000-0000-0000-0000-000000000100")
OTHER_PRODUCT = UUID("00000000-0000-0000-0000-000000000101")

A = UUID("00000000-0000-0000-0000-0000000000a1")
B = UUID("00000000-0000-0000-0000-0000000000a2")
C = UUID("00000000-0000-0000-0000-0000000000a3")
D = UUID("00000000-0000-0000-0000-0000000000a4")

_ids = count(1)


def make_tournament(product_id: Optional[UUID] = None) -> Tournament:
    return Tournament(
        tournament_id=UUID("00000000-0000-0000-0000-000000000900"),
        slug="spring-sprint",
        title="Spring Sprint",
        status=TournamentStatus.LIVE,
        start_at=START,
        end_at=END,
        product_id=product_id,
    )


def make_order(
    creator_id: Optional[UUID],
    amount: int,
    created_at: datetime = START + timedelta(days=1),
    status: OrderStatus = OrderStatus.COMPLETED,
    product_id: UUID = PRODUCT,
) -> Order:
    return Order(
        order_id=UUID(int=next(_ids)),
        product_id=product_id,
        amount=amount,
        status=status,
        created_at=created_at,
        creator_id=creator_id,
    )


def test_rankings_sorted_by_revenue() -> None:
    orders = [
        make_order(A, 1000),
        make_order(B, 5000),
        make_order(A, 3000),
        make_order(C, 2000),
    ]

    rankings = build_tournament_ranking(orders, make_tournament())

    assert [(row.creator_id, row.total_orders, row.total_revenue, row.rank) for row in rankings] == [
        (B, 1, 5000, 1),
        (A, 2, 4000, 2),
        (C, 1, 2000, 3),
    ]


def test_revenue_is_non_increasing_and_ranks_are_sequential() -> None:
    amounts = [700, 300, 900, 300, 100, 900, 50]
    creators = [UUID(int=1000 + i) for i in range(len(amounts))]
    orders = [make_order(creator, amount) for creator, amount in zip(creators, amounts)]

    rankings = build_tournament_ranking(orders, make_tournament())

    revenues = [row.total_revenue for row in rankings]
    assert revenues == sorted(revenues, reverse=True)
    assert [row.rank for row in rankings] == list(range(1, len(amounts) + 1))


def test_ties_get_consecutive_ranks_in_aggregation_order() -> None:
    """Two creators tied for third place take ranks 3 and 4."""

    orders = [
        make_order(A, 9000),
        make_order(B, 8000),
        make_order(C, 5000),
        make_order(D, 5000),
    ]

    rankings = build_tournament_ranking(orders, make_tournament())

    assert [(row.creator_id, row.rank) for row in rankings] == [(A, 1), (B, 2), (C, 3), (D, 4)]


def test_window_bounds_are_inclusive() -> None:
    orders = [
        make_order(A, 100, created_at=START),
        make_order(B, 100, created_at=END),
        make_order(C, 100, created_at=START - timedelta(seconds=1)),
        make_order(D, 100, created_at=END + timedelta(seconds=1)),
    ]

    ranked = {row.creator_id for row in build_tournament_ranking(orders, make_tournament())}

    assert ranked == {A, B}


def test_only_completed_attributed_orders_count() -> None:
    orders = [
        make_order(A, 100),
        make_order(B, 100, status=OrderStatus.REFUNDED),
        make_order(None, 100),
    ]

    rankings = build_tournament_ranking(orders, make_tournament())

    assert [row.creator_id for row in rankings] == [A]


def test_product_scope() -> None:
    orders = [
        make_order(A, 100, product_id=PRODUCT),
        make_order(B, 500, product_id=OTHER_PRODUCT),
    ]

    rankings = build_tournament_ranking(orders, make_tournament(product_id=PRODUCT))

    assert [row.creator_id for row in rankings] == [A]


def test_get_user_rank() -> None:
    rankings = build_tournament_ranking([make_order(A, 100), make_order(B, 200)], make_tournament())

    assert get_user_rank(rankings, A) == 2
    assert get_user_rank(rankings, C) is None


def _seed_tournament(fake_db) -> None:
    fake_db.seed(
        "tournaments",
        {
            "id": "00000000-0000-0000-0000-000000000900",
            "slug": "spring-sprint",
            "title": "Spring Sprint",
            "status": "live",
            "start_at": START.isoformat(),
            "end_at": END.isoformat(),
            "product_id": None,
        },
    )


def _seed_order(fake_db, creator_id: UUID, amount: int, created_at: datetime) -> None:
    fake_db.seed(
        "orders",
        {
            "product_id": str(PRODUCT),
            "creator_id": str(creator_id),
            "amount": amount,
            "status": "completed",
            "source": "direct",
            "created_at": created_at.isoformat(),
        },
    )


def test_leaderboard_limits_rows_but_ranks_viewer_on_full_set(fake_db) -> None:
    _seed_tournament(fake_db)
    inside = START + timedelta(days=2)
    _seed_order(fake_db, A, 3000, inside)
    _seed_order(fake_db, B, 2000, inside)
    _seed_order(fake_db, C, 1000, inside)
    _seed_order(fake_db, D, 9999, START - timedelta(days=1))

    leaderboard = get_tournament_leaderboard("spring-sprint", limit=2, viewer_id=C)

    assert [row.creator_id for row in leaderboard.rankings] == [A, B]
    assert leaderboard.my_rank == 3
    assert leaderboard.tournament.slug == "spring-sprint"


def test_leaderboard_without_viewer_has_no_rank(fake_db) -> None:
    _seed_tournament(fake_db)

    leaderboard = get_tournament_leaderboard("spring-sprint")

    assert leaderboard.rankings == []
    assert leaderboard.my_rank is None


def test_leaderboard_unknown_slug(fake_db) -> None:
    with pytest.raises(NotFoundError):
        get_tournament_leaderboard("missing")


@pytest.mark.parametrize("limit", [0, 101])
def test_leaderboard_limit_bounds(fake_db, limit: int) -> None:
    with pytest.raises(ValidationError):
        get_tournament_leaderboard("spring-sprint", limit=limit)


def test_leaderboard_reads_past_the_per_request_row_cap(fake_db) -> None:
    _seed_tournament(fake_db)
    inside = (START + timedelta(days=3)).isoformat()
    rows = [
        {
            "product_id": str(PRODUCT),
            "creator_id": str(creator_id),
            "amount": amount,
            "status": "completed",
            "source": "direct",
            "created_at": inside,
        }
        for creator_id, amount, copies in ((A, 100, 1000), (B, 10000, 20))
        for _ in range(copies)
    ]
    fake_db.seed("orders", *rows)

    leaderboard = get_tournament_leaderboard("spring-sprint", viewer_id=A)

    assert [(row.creator_id, row.total_orders, row.total_revenue) for row in leaderboard.rankings] == [
        (B, 20, 200000),
        (A, 1000, 100000),
    ]
    assert leaderboard.my_rank == 2


LINK_A = UUID("00000000-0000-0000-0000-00000000f0a1")
LINK_A2 = UUID("00000000-0000-0000-0000-00000000f0a2")
LINK_B = UUID("00000000-0000-0000-0000-00000000f0b1")
VIEWER = Actor(actor_id=C, role="creator")


def test_creator_ranking_credits_link_owner() -> None:
    orders = [
        replace(make_order(None, 1000), affiliate_link_id=LINK_A),
        replace(make_order(D, 2000), affiliate_link_id=LINK_A2),
        replace(make_order(None, 2500), affiliate_link_id=LINK_B),
        make_order(B, 99999),
        replace(make_order(None, 7777), affiliate_link_id=UUID(int=404)),
        replace(make_order(None, 5000, status=OrderStatus.REFUNDED), affiliate_link_id=LINK_B),
    ]

    rankings = build_creator_ranking(orders, {LINK_A: A, LINK_A2: A, LINK_B: B})

    assert [(row.creator_id, row.total_orders, row.total_sales, row.rank) for row in rankings] == [
        (A, 2, 3000, 1),
        (B, 1, 2500, 2),
    ]
    assert [row.estimated_commission for row in rankings] == [900, 750]


def test_creator_rankings_keep_top_twenty_and_rank_viewer_on_full_set(fake_db) -> None:
    creators = [UUID(int=1000 + i) for i in range(25)]
    fake_db.seed(
        "affiliate_links",
        *(
            {
                "id": str(UUID(int=2000 + i)),
                "product_id": str(PRODUCT),
                "creator_id": str(creator),
                "affiliate_code": f"CODE{i:04d}",
                "status": "active",
            }
            for i, creator in enumerate(creators)
        ),
    )
    fake_db.seed(
        "orders",
        *(
            {
                "product_id": str(PRODUCT),
                "affiliate_link_id": str(UUID(int=2000 + i)),
                "amount": 1000 * (25 - i),
                "status": "completed",
                "source": "stripe",
            }
            for i in range(25)
        ),
    )

    result = get_creator_rankings(viewer_id=creators[-1])

    assert len(result.rankings) == 20
    assert result.rankings[0].creator_id == creators[0]
    assert result.my_rank == 25


def test_creator_rankings_without_attributed_orders(fake_db) -> None:
    _seed_order(fake_db, A, 3000, START)

    result = get_creator_rankings(viewer_id=A)

    assert result.rankings == []
    assert result.my_rank is None


def test_tournament_listing_filters_and_orders(fake_db) -> None:
    fake_db.seed(
        "tournaments",
        {"slug": "winter", "title": "Winter", "status": "finished",
         "start_at": "2025-01-01T00:00:00+00:00", "end_at": "2025-01-31T00:00:00+00:00"},
        {"slug": "spring", "title": "Spring", "status": "live",
         "start_at": "2025-03-01T00:00:00+00:00", "end_at": "2025-03-31T00:00:00+00:00"},
        {"slug": "serum", "title": "Serum", "status": "live", "product_id": str(PRODUCT),
         "start_at": "2025-03-10T00:00:00+00:00", "end_at": "2025-03-20T00:00:00+00:00"},
    )

    assert [t.slug for t in list_arena_tournaments(VIEWER)] == ["serum", "spring", "winter"]
    assert [t.slug for t in list_arena_tournaments(VIEWER, status=TournamentStatus.LIVE)] == ["serum", "spring"]
    assert [t.slug for t in list_arena_tournaments(VIEWER, product_id=PRODUCT)] == ["serum"]


def test_tournament_listing_and_detail_need_a_caller(fake_db) -> None:
    _seed_tournament(fake_db)

    with pytest.raises(AuthenticationError):
        list_arena_tournaments(None)
    with pytest.raises(AuthenticationError):
        get_tournament_detail(None, "spring-sprint")


def test_tournament_detail(fake_db) -> None:
    _seed_tournament(fake_db)

    detail = get_tournament_detail(VIEWER, "spring-sprint")

    assert detail.tournament.title == "Spring Sprint"
    assert detail.product is None

    with pytest.raises(NotFoundError):
        get_tournament_detail(VIEWER, "missing")
