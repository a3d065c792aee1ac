"""
Fraud Detection API Endpoints.

Internal endpoint that screens one order against the fraud rules. Callers
authenticate with the shared X-Internal-Token header or an admin token.
"""

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from api.dependencies import enforce_rate_limit, get_client_ip, get_fraud_rate_limiter, resolve_actor
from api.errors import internal_error, to_http_exception
from api.models import FraudDetectRequest, FraudDetectResponse, FraudFlagResponse
from api.settings import Settings, get_settings
from services.errors import AuthenticationError, SettlementError
from services.fraud_service import detect_fraud
from services.rate_limiter import RateLimiter

router = APIRouter()

FRAUD_ENDPOINT = "/api/v1/fraud/detect"


def _has_internal_token(presented: Optional[str], expected: Optional[str]) -> bool:
    if not presented or not expected:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


@router.post(
    "/fraud/detect",
    response_model=FraudDetectResponse,
    summary="Detect Fraud",
    description="Evaluate the fraud rules for a completed order and store any flags."
)
def detect_order_fraud(
    request: FraudDetectRequest,
    authorization: Optional[str] = Header(default=None),
    client_ip: str = Depends(get_client_ip),
    limiter: RateLimiter = Depends(get_fraud_rate_limiter),
    settings: Settings = Depends(get_settings),
    internal_token: Optional[str] = Header(default=None, alias="X-Internal-Token"),
):
    """
    Screen an order for fraud.

    Flags are advisory and never block the order or its payout. Orders that
    are not completed are skipped with an explanatory message.

    **Rate limit:** 20 requests per 5 minutes.
    """
    try:
        enforce_rate_limit(limiter, None, client_ip, FRAUD_ENDPOINT)

        internal = _has_internal_token(internal_token, settings.internal_api_token)
        actor = None if internal else resolve_actor(authorization)
        if not internal and (actor is None or not actor.is_admin()):
            raise AuthenticationError("Unauthorized")

        if actor is not None:
            enforce_rate_limit(limiter, actor.actor_id, client_ip, FRAUD_ENDPOINT)

        result = detect_fraud(request.order_id)

        return FraudDetectResponse(
            message=result.message,
            flags=[FraudFlagResponse.from_flag(flag) for flag in result.flags],
        )

    except SettlementError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception:
        raise internal_error("detect fraud")
