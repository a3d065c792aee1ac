"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
Amounts are integers in the smallest currency unit (cents).
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from domain.fraud import FraudFlag
from domain.order import Order
from domain.payout import Payout
from domain.product import Product
from domain.tournament import Tournament, TournamentRankingRow


# ============================================================================
# Order Models
# ============================================================================

class OrderCreateRequest(BaseModel):
    """Request to record an order directly."""
    product_id: UUID
    amount: int = Field(..., gt=0, description="Order amount in the smallest currency unit")
    affiliate_code: Optional[str] = Field(default=None, max_length=32)

    class Config:
        json_schema_extra = {
            "example": {
                "product_id": "123e4567-e89b-12d3-a456-426614174000",
                "amount": 10000,
                "affiliate_code": "K7Q2M9XA"
            }
        }


class OrderResponse(BaseModel):
    """Single order in API response."""
    id: UUID
    product_id: UUID
    creator_id: Optional[UUID] = None
    amount: int
    status: str
    source: Optional[str] = None
    affiliate_link_id: Optional[UUID] = None
    created_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.order_id,
            product_id=order.product_id,
            creator_id=order.creator_id,
            amount=order.amount,
            status=order.status.value,
            source=order.source.value if order.source else None,
            affiliate_link_id=order.affiliate_link_id,
            created_at=order.created_at,
        )


class OrderCreateResponse(BaseModel):
    success: bool = True
    order: OrderResponse

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "order": {
                    "id": "123e4567-e89b-12d3-a456-426614174010",
                    "product_id": "123e4567-e89b-12d3-a456-426614174000",
                    "creator_id": "123e4567-e89b-12d3-a456-426614174001",
                    "amount": 10000,
                    "status": "completed",
                    "source": "direct",
                    "affiliate_link_id": None,
                    "created_at": "2025-01-01T12:00:00Z"
                }
            }
        }


# ============================================================================
# Webhook Models
# ============================================================================

class WebhookProcessedResponse(BaseModel):
    success: bool = True
    order_id: UUID


class WebhookAcknowledgedResponse(BaseModel):
    received: bool = True


# ============================================================================
# Fraud Models
# ============================================================================

class FraudDetectRequest(BaseModel):
    order_id: UUID

    class Config:
        json_schema_extra = {
            "example": {
                "order_id": "123e4567-e89b-12d3-a456-426614174010"
            }
        }


class FraudFlagResponse(BaseModel):
    id: Optional[UUID] = None
    order_id: UUID
    creator_id: Optional[UUID] = None
    brand_id: Optional[UUID] = None
    reason: str
    severity: str
    reviewed: bool = False

    @classmethod
    def from_flag(cls, flag: FraudFlag) -> "FraudFlagResponse":
        return cls(
            id=flag.flag_id,
            order_id=flag.order_id,
            creator_id=flag.creator_id,
            brand_id=flag.brand_id,
            reason=flag.reason,
            severity=flag.severity.value,
            reviewed=flag.reviewed,
        )


class FraudDetectResponse(BaseModel):
    success: bool = True
    message: str
    flags: List[FraudFlagResponse]

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "message": "Detected 1 fraud flag(s)",
                "flags": [
                    {
                        "id": "123e4567-e89b-12d3-a456-426614174020",
                        "order_id": "123e4567-e89b-12d3-a456-426614174010",
                        "creator_id": "123e4567-e89b-12d3-a456-426614174001",
                        "brand_id": "123e4567-e89b-12d3-a456-426614174001",
                        "reason": "Self-purchase detected (creator_id === brand_id)",
                        "severity": "high",
                        "reviewed": False
                    }
                ]
            }
        }


# ============================================================================
# Payout Models
# ============================================================================

class PayoutGenerateRequest(BaseModel):
    """Restrict the run to a single order."""
    order_id: Optional[UUID] = None


class PayoutResponse(BaseModel):
    id: UUID
    order_id: UUID
    creator_id: Optional[UUID] = None
    brand_id: Optional[UUID] = None
    gross_amount: int
    creator_amount: int
    platform_amount: int
    brand_amount: int
    status: str

    @classmethod
    def from_payout(cls, payout: Payout) -> "PayoutResponse":
        return cls(
            id=payout.payout_id,
            order_id=payout.order_id,
            creator_id=payout.creator_id,
            brand_id=payout.brand_id,
            gross_amount=payout.gross_amount,
            creator_amount=payout.creator_amount,
            platform_amount=payout.platform_amount,
            brand_amount=payout.brand_amount,
            status=payout.status.value,
        )


class PayoutGenerateResponse(BaseModel):
    success: bool = True
    message: str
    generated: int
    payouts: List[PayoutResponse]

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "message": "Generated 1 payouts",
                "generated": 1,
                "payouts": [
                    {
                        "id": "123e4567-e89b-12d3-a456-426614174030",
                        "order_id": "123e4567-e89b-12d3-a456-426614174010",
                        "creator_id": "123e4567-e89b-12d3-a456-426614174001",
                        "brand_id": "123e4567-e89b-12d3-a456-426614174002",
                        "gross_amount": 10000,
                        "creator_amount": 2500,
                        "platform_amount": 1500,
                        "brand_amount": 6000,
                        "status": "pending"
                    }
                ]
            }
        }


# ============================================================================
# Arena Models
# ============================================================================

class TournamentResponse(BaseModel):
    id: UUID
    slug: str
    title: str
    status: str
    start_at: datetime
    end_at: datetime
    product_id: Optional[UUID] = None
    description: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_tournament(cls, tournament: Tournament) -> "TournamentResponse":
        return cls(
            id=tournament.tournament_id,
            slug=tournament.slug,
            title=tournament.title,
            status=tournament.status.value,
            start_at=tournament.start_at,
            end_at=tournament.end_at,
            product_id=tournament.product_id,
            description=tournament.description,
            created_by=tournament.created_by,
            created_at=tournament.created_at,
            updated_at=tournament.updated_at,
        )


class RankingRowResponse(BaseModel):
    creator_id: UUID
    total_orders: int
    total_revenue: int
    rank: int

    @classmethod
    def from_row(cls, row: TournamentRankingRow) -> "RankingRowResponse":
        return cls(
            creator_id=row.creator_id,
            total_orders=row.total_orders,
            total_revenue=row.total_revenue,
            rank=row.rank,
        )


class LeaderboardResponse(BaseModel):
    tournament: TournamentResponse
    rankings: List[RankingRowResponse]
    my_rank: Optional[int] = None

    class Config:
        json_schema_extra = {
            "example": {
                "tournament": {
                    "id": "123e4567-e89b-12d3-a456-426614174040",
                    "slug": "spring-sprint",
                    "title": "Spring Sprint",
                    "status": "live",
                    "start_at": "2025-03-01T00:00:00Z",
                    "end_at": "2025-03-31T23:59:59Z",
                    "product_id": None,
                    "description": None
                },
                "rankings": [
                    {
                        "creator_id": "123e4567-e89b-12d3-a456-426614174001",
                        "total_orders": 12,
                        "total_revenue": 120000,
                        "rank": 1
                    }
                ],
                "my_rank": 1
            }
        }


class TournamentListResponse(BaseModel):
    tournaments: List[TournamentResponse]


class ProductSummaryResponse(BaseModel):
    id: UUID
    name: str
    price: int
    image_url: Optional[str] = None

    @classmethod
    def from_product(cls, product: Product) -> "ProductSummaryResponse":
        return cls(
            id=product.product_id,
            name=product.name,
            price=product.price,
            image_url=product.image_url,
        )


class TournamentDetailResponse(BaseModel):
    tournament: TournamentResponse
    product: Optional[ProductSummaryResponse] = None


class CreatorRankingRowResponse(BaseModel):
    creator_id: UUID
    total_orders: int
    total_sales: int
    estimated_commission: int
    rank: int


class CreatorRankingsResponse(BaseModel):
    """All-time creator ranking by sales made through affiliate links."""
    rankings: List[CreatorRankingRowResponse]
    my_rank: Optional[int] = None

    class Config:
        json_schema_extra = {
            "example": {
                "rankings": [
                    {
                        "creator_id": "123e4567-e89b-12d3-a456-426614174001",
                        "total_orders": 40,
                        "total_sales": 400000,
                        "estimated_commission": 120000,
                        "rank": 1
                    }
                ],
                "my_rank": None
            }
        }


# ============================================================================
# Affiliate Link Models
# ============================================================================

class AffiliateLinkRequest(BaseModel):
    product_id: UUID


class AffiliateLinkResponse(BaseModel):
    success: bool = True
    affiliate_code: str
    message: str

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "affiliate_code": "K7Q2M9XA",
                "message": "Affiliate link created"
            }
        }
