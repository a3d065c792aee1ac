"""
Orders API Endpoints.

Direct order creation by creator-class accounts.
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException

from api.dependencies import enforce_rate_limit, get_client_ip, get_orders_rate_limiter, resolve_actor
from api.errors import internal_error, to_http_exception
from api.models import OrderCreateRequest, OrderCreateResponse, OrderResponse
from services.errors import SettlementError
from services.fraud_dispatch import FraudDispatcher
from services.order_service import OrderRequest, create_order
from services.rate_limiter import RateLimiter

router = APIRouter()

ORDERS_ENDPOINT = "/api/v1/orders"


@router.post(
    "/orders",
    response_model=OrderCreateResponse,
    status_code=201,
    summary="Create Order",
    description="Record a completed order on behalf of the authenticated creator."
)
def create_direct_order(
    request: OrderCreateRequest,
    background_tasks: BackgroundTasks,
    authorization: Optional[str] = Header(default=None),
    client_ip: str = Depends(get_client_ip),
    limiter: RateLimiter = Depends(get_orders_rate_limiter),
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
):
    """
    Create an order.

    **Process:**
    1. Rate limit by origin, then by actor (10 requests per minute)
    2. Require a creator or influencer account
    3. Validate the product and resolve the optional affiliate code
    4. Record the order as completed
    5. Schedule fraud screening after the response is sent

    **Idempotency:**
    Send an `Idempotency-Key` header to make retries safe; a repeated key
    returns the first order.

    **Example request:**
    ```json
    {
      "product_id": "123e4567-e89b-12d3-a456-426614174000",
      "amount": 10000,
      "affiliate_code": "K7Q2M9XA"
    }
    ```
    """
    try:
        enforce_rate_limit(limiter, None, client_ip, ORDERS_ENDPOINT)

        actor = resolve_actor(authorization)
        if actor is not None:
            enforce_rate_limit(limiter, actor.actor_id, client_ip, ORDERS_ENDPOINT)

        order = create_order(
            actor,
            OrderRequest(
                product_id=request.product_id,
                amount=request.amount,
                affiliate_code=request.affiliate_code,
                idempotency_key=idempotency_key,
            ),
            client_ip=client_ip,
            on_created=FraudDispatcher(background_tasks).enqueue,
        )

        return OrderCreateResponse(order=OrderResponse.from_order(order))

    except SettlementError as e:
        raise to_http_exception(e)
    except HTTPException:
        raise
    except Exception:
        raise internal_error("create order")
