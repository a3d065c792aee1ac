"""
Creator rankings: tournament leaderboards and the all-time sales ranking.

Rankings are computed at read time from orders:
1. keep completed orders created inside [start_at, end_at] (inclusive),
   for the tournament's product when it is scoped to one, with a creator
2. group by creator, summing order count and gross amount
3. sort by summed amount, descending
4. assign ranks 1..n

Ties are not collapsed. The sort is stable, so creators with equal revenue
keep the order in which aggregation first met them and receive consecutive
distinct ranks (e.g. 3 and 4).

The all-time ranking credits each completed order to the creator who owns
the affiliate link it came through; orders without a link do not count.
It also reports an estimated commission at a flat 30% of sales.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from domain.actor import Actor
from domain.order import Order
from domain.product import Product
from domain.tournament import Tournament, TournamentRankingRow, TournamentStatus
from repositories.affiliate_link_repository import get_link_creator_ids
from repositories.order_repository import list_completed_orders, list_completed_orders_between
from repositories.product_repository import get_product_by_id
from repositories.tournament_repository import get_tournament_by_slug, list_tournaments
from services.errors import AuthenticationError, NotFoundError, ValidationError

DEFAULT_LEADERBOARD_LIMIT = 20
MAX_LEADERBOARD_LIMIT = 100

CREATOR_RANKING_LIMIT = 20
ESTIMATED_COMMISSION_RATE = Decimal("0.3")


@dataclass(frozen=True, slots=True)
class Leaderboard:
    tournament: Tournament
    rankings: List[TournamentRankingRow]
    my_rank: Optional[int]


@dataclass(frozen=True, slots=True)
class CreatorRankingRow:
    creator_id: UUID
    total_orders: int
    total_sales: int
    estimated_commission: int
    rank: int


@dataclass(frozen=True, slots=True)
class CreatorRankings:
    rankings: List[CreatorRankingRow]
    my_rank: Optional[int]


@dataclass(frozen=True, slots=True)
class TournamentDetail:
    tournament: Tournament
    product: Optional[Product]


def _in_tournament(order: Order, tournament: Tournament) -> bool:
    if not order.is_completed or order.creator_id is None:
        return False
    if tournament.product_id is not None and order.product_id != tournament.product_id:
        return False
    return tournament.contains(order.created_at)


def build_tournament_ranking(
    orders: Iterable[Order],
    tournament: Tournament,
) -> List[TournamentRankingRow]:
    """
    Build the creator leaderboard for a tournament.

    Args:
        orders: Candidate orders (any period; filtered here)
        tournament: Tournament providing the window and product scope

    Returns:
        Ranking rows sorted by total_revenue descending, rank starting at 1

    Example:
        rankings = build_tournament_ranking(orders, tournament)
        # [TournamentRankingRow(creator_id=..., total_orders=10, total_revenue=100000, rank=1), ...]
    """
    totals: Dict[UUID, List[int]] = {}

    for order in orders:
        if not _in_tournament(order, tournament):
            continue
        entry = totals.setdefault(order.creator_id, [0, 0])
        entry[0] += 1
        entry[1] += order.amount

    ordered = sorted(totals.items(), key=lambda item: item[1][1], reverse=True)

    return [
        TournamentRankingRow(
            tournament_id=tournament.tournament_id,
            creator_id=creator_id,
            total_orders=count,
            total_revenue=revenue,
            rank=index + 1,
        )
        for index, (creator_id, (count, revenue)) in enumerate(ordered)
    ]


def get_user_rank(rankings: Iterable[TournamentRankingRow], user_id: UUID) -> Optional[int]:
    """Return the user's rank, or None when the user is not ranked."""
    for row in rankings:
        if row.creator_id == user_id:
            return row.rank
    return None


def get_tournament_leaderboard(
    slug: str,
    *,
    limit: int = DEFAULT_LEADERBOARD_LIMIT,
    viewer_id: Optional[UUID] = None,
) -> Leaderboard:
    """
    Load a tournament and rank its creators.

    my_rank is looked up in the full ranking, so a viewer outside the
    returned top `limit` rows still learns their position.

    Raises:
        ValidationError: limit outside 1..100
        NotFoundError: No tournament with this slug
    """
    if limit < 1 or limit > MAX_LEADERBOARD_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_LEADERBOARD_LIMIT}")

    tournament = get_tournament_by_slug(slug)
    if tournament is None:
        raise NotFoundError("Tournament not found")

    orders = list_completed_orders_between(
        tournament.start_at,
        tournament.end_at,
        product_id=tournament.product_id,
    )
    rankings = build_tournament_ranking(orders, tournament)

    return Leaderboard(
        tournament=tournament,
        rankings=rankings[:limit],
        my_rank=get_user_rank(rankings, viewer_id) if viewer_id else None,
    )


def build_creator_ranking(
    orders: Iterable[Order],
    link_creators: Mapping[UUID, UUID],
) -> List[CreatorRankingRow]:
    """
    Rank creators by all-time sales made through their affiliate links.

    Args:
        orders: Completed orders
        link_creators: affiliate_link_id -> owning creator_id

    Returns:
        Ranking rows sorted by total_sales descending, rank starting at 1
    """
    totals: Dict[UUID, List[int]] = {}

    for order in orders:
        if not order.is_completed or order.affiliate_link_id is None:
            continue
        creator_id = link_creators.get(order.affiliate_link_id)
        if creator_id is None:
            continue
        entry = totals.setdefault(creator_id, [0, 0])
        entry[0] += 1
        entry[1] += order.amount

    ordered = sorted(totals.items(), key=lambda item: item[1][1], reverse=True)

    return [
        CreatorRankingRow(
            creator_id=creator_id,
            total_orders=count,
            total_sales=sales,
            estimated_commission=int(
                (sales * ESTIMATED_COMMISSION_RATE).to_integral_value(rounding=ROUND_FLOOR)
            ),
            rank=index + 1,
        )
        for index, (creator_id, (count, sales)) in enumerate(ordered)
    ]


def get_creator_rankings(viewer_id: Optional[UUID] = None) -> CreatorRankings:
    """
    All-time top creators by attributed sales.

    Returns the top CREATOR_RANKING_LIMIT rows. my_rank comes from the full
    ranking, as on tournament leaderboards.
    """
    orders = [order for order in list_completed_orders() if order.affiliate_link_id is not None]
    if not orders:
        return CreatorRankings(rankings=[], my_rank=None)

    link_creators = get_link_creator_ids(order.affiliate_link_id for order in orders)
    rankings = build_creator_ranking(orders, link_creators)

    my_rank = None
    if viewer_id is not None:
        my_rank = next((row.rank for row in rankings if row.creator_id == viewer_id), None)

    return CreatorRankings(rankings=rankings[:CREATOR_RANKING_LIMIT], my_rank=my_rank)


def list_arena_tournaments(
    actor: Optional[Actor],
    *,
    status: Optional[TournamentStatus] = None,
    product_id: Optional[UUID] = None,
) -> List[Tournament]:
    """
    List tournaments for a signed-in user, most recently started first.

    Raises:
        AuthenticationError: Anonymous caller
    """
    if actor is None:
        raise AuthenticationError("Authentication required to view tournaments")

    return list_tournaments(status=status, product_id=product_id)


def get_tournament_detail(actor: Optional[Actor], slug: str) -> TournamentDetail:
    """
    Load a tournament together with the product it is scoped to, if any.

    Raises:
        AuthenticationError: Anonymous caller
        NotFoundError: No tournament with this slug
    """
    if actor is None:
        raise AuthenticationError("Authentication required to view tournament")

    tournament = get_tournament_by_slug(slug)
    if tournament is None:
        raise NotFoundError("Tournament not found")

    product = get_product_by_id(tournament.product_id) if tournament.product_id else None

    return TournamentDetail(tournament=tournament, product=product)


__all__ = [
    "Leaderboard",
    "CreatorRankingRow",
    "CreatorRankings",
    "TournamentDetail",
    "build_tournament_ranking",
    "get_user_rank",
    "get_tournament_leaderboard",
    "build_creator_ranking",
    "get_creator_rankings",
    "list_arena_tournaments",
    "get_tournament_detail",
]
