"""
Arena API Endpoints.

Creator rankings: tournament listings, tournament detail, tournament
leaderboards and the all-time sales ranking.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_optional_actor
from api.errors import internal_error, to_http_exception
from api.models import (
    CreatorRankingRowResponse,
    CreatorRankingsResponse,
    LeaderboardResponse,
    ProductSummaryResponse,
    RankingRowResponse,
    TournamentDetailResponse,
    TournamentListResponse,
    TournamentResponse,
)
from domain.actor import Actor
from domain.tournament import TournamentStatus
from services.errors import SettlementError
from services.ranking_service import (
    DEFAULT_LEADERBOARD_LIMIT,
    MAX_LEADERBOARD_LIMIT,
    get_creator_rankings,
    get_tournament_detail,
    get_tournament_leaderboard,
    list_arena_tournaments,
)

router = APIRouter()


@router.get(
    "/arena/tournaments",
    response_model=TournamentListResponse,
    summary="List Tournaments",
    description="List tournaments, most recently started first."
)
def get_tournaments(
    status: Optional[TournamentStatus] = Query(None, description="scheduled, live or finished"),
    product_id: Optional[UUID] = Query(None, description="Only tournaments for this product"),
    actor: Optional[Actor] = Depends(get_optional_actor),
):
    """
    List tournaments.

    Requires authentication.

    **Example usage:**
    ```
    GET /api/v1/arena/tournaments?status=live
    ```
    """
    try:
        tournaments = list_arena_tournaments(actor, status=status, product_id=product_id)

        return TournamentListResponse(
            tournaments=[TournamentResponse.from_tournament(t) for t in tournaments]
        )

    except SettlementError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception:
        raise internal_error("list tournaments")


@router.get(
    "/arena/tournaments/{slug}",
    response_model=TournamentDetailResponse,
    summary="Tournament Detail",
    description="Get a tournament and the product it is scoped to."
)
def get_tournament(
    slug: str,
    actor: Optional[Actor] = Depends(get_optional_actor),
):
    """
    Get a tournament by slug.

    Requires authentication. `product` is null for tournaments open to every
    product, or when the product no longer exists.
    """
    try:
        detail = get_tournament_detail(actor, slug)

        return TournamentDetailResponse(
            tournament=TournamentResponse.from_tournament(detail.tournament),
            product=ProductSummaryResponse.from_product(detail.product) if detail.product else None,
        )

    except SettlementError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception:
        raise internal_error("load tournament")


@router.get(
    "/arena/tournaments/{slug}/leaderboard",
    response_model=LeaderboardResponse,
    summary="Tournament Leaderboard",
    description="Rank creators of a tournament by revenue of completed orders."
)
def get_leaderboard(
    slug: str,
    limit: int = Query(DEFAULT_LEADERBOARD_LIMIT, ge=1, le=MAX_LEADERBOARD_LIMIT, description="Number of rows"),
    actor: Optional[Actor] = Depends(get_optional_actor),
):
    """
    Get a tournament leaderboard.

    Authentication is optional; signed-in callers also receive `my_rank`,
    their position in the full ranking (null when they have no orders).

    **Example usage:**
    ```
    GET /api/v1/arena/tournaments/spring-sprint/leaderboard?limit=10
    ```
    """
    try:
        leaderboard = get_tournament_leaderboard(
            slug,
            limit=limit,
            viewer_id=actor.actor_id if actor else None,
        )

        return LeaderboardResponse(
            tournament=TournamentResponse.from_tournament(leaderboard.tournament),
            rankings=[RankingRowResponse.from_row(row) for row in leaderboard.rankings],
            my_rank=leaderboard.my_rank,
        )

    except SettlementError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception:
        raise internal_error("load leaderboard")


@router.get(
    "/rankings",
    response_model=CreatorRankingsResponse,
    summary="Creator Rankings",
    description="Top 20 creators by all-time sales made through their affiliate links."
)
def get_rankings(actor: Optional[Actor] = Depends(get_optional_actor)):
    """
    Get the all-time creator ranking.

    Authentication is optional; signed-in callers also receive `my_rank`.
    `estimated_commission` assumes a flat 30% commission.
    """
    try:
        result = get_creator_rankings(viewer_id=actor.actor_id if actor else None)

        return CreatorRankingsResponse(
            rankings=[
                CreatorRankingRowResponse(
                    creator_id=row.creator_id,
                    total_orders=row.total_orders,
                    total_sales=row.total_sales,
                    estimated_commission=row.estimated_commission,
                    rank=row.rank,
                )
                for row in result.rankings
            ],
            my_rank=result.my_rank,
        )

    except SettlementError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception:
        raise internal_error("load rankings")
