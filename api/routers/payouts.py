"""
Payouts API Endpoints.

Admin-triggered generation of pending payouts for completed orders.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from api.dependencies import get_optional_actor
from api.errors import internal_error, to_http_exception
from api.models import PayoutGenerateRequest, PayoutGenerateResponse, PayoutResponse
from domain.actor import Actor
from services.errors import AuthenticationError, AuthorizationError, SettlementError
from services.payout_service import generate_payouts

router = APIRouter()


@router.post(
    "/payouts/generate",
    response_model=PayoutGenerateResponse,
    summary="Generate Payouts",
    description="Create pending payouts for completed orders that do not have one yet."
)
def generate_pending_payouts(
    response: Response,
    request: Optional[PayoutGenerateRequest] = None,
    actor: Optional[Actor] = Depends(get_optional_actor),
):
    """
    Generate payouts.

    Safe to re-run: orders that already have a payout are skipped. Send
    `{"order_id": ...}` to settle a single order.

    Returns 201 when payouts were created and 200 when there was nothing to do.
    """
    try:
        if actor is None:
            raise AuthenticationError("Unauthorized")
        if not actor.is_admin():
            raise AuthorizationError("Admin access required")

        result = generate_payouts(request.order_id if request else None)

        response.status_code = 201 if result.generated > 0 else 200
        return PayoutGenerateResponse(
            message=result.message,
            generated=result.generated,
            payouts=[PayoutResponse.from_payout(payout) for payout in result.payouts],
        )

    except SettlementError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception:
        raise internal_error("generate payouts")
