"""
Affiliate Link API Endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from api.dependencies import get_optional_actor
from api.errors import internal_error, to_http_exception
from api.models import AffiliateLinkRequest, AffiliateLinkResponse
from domain.actor import Actor
from services.affiliate_service import create_affiliate_link
from services.errors import SettlementError

router = APIRouter()


@router.post(
    "/affiliate-links",
    response_model=AffiliateLinkResponse,
    summary="Create Affiliate Link",
    description="Issue the caller's referral code for an active product."
)
def create_link(
    request: AffiliateLinkRequest,
    response: Response,
    actor: Optional[Actor] = Depends(get_optional_actor),
):
    """
    Create (or return) an affiliate link.

    A creator has at most one active link per product: repeating the call
    returns the existing code with status 200 instead of 201.
    """
    try:
        link, created = create_affiliate_link(actor, request.product_id)

        response.status_code = 201 if created else 200
        return AffiliateLinkResponse(
            affiliate_code=link.affiliate_code,
            message="Affiliate link created" if created else "Affiliate link already exists",
        )

    except SettlementError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception:
        raise internal_error("create affiliate link")
