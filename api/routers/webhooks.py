"""
Payment Webhook Endpoint.

Receives checkout events from the payment processor. The body must be read
raw: the signature covers the exact bytes that were sent.
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from api.errors import internal_error, to_http_exception
from api.models import WebhookAcknowledgedResponse, WebhookProcessedResponse
from api.settings import Settings, get_settings
from services.errors import SettlementError, SignatureVerificationError
from services.fraud_dispatch import FraudDispatcher
from services.payment_confirmation_service import handle_payment_event

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/payments/webhook",
    response_model=Union[WebhookProcessedResponse, WebhookAcknowledgedResponse],
    summary="Payment Webhook",
    description="Ingest a signed checkout.session.completed event."
)
async def payment_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
):
    """
    Confirm a paid checkout session.

    Redelivered events for the same session return the same order and never
    create a second order or payout. Other event types are acknowledged with
    `{"received": true}`.
    """
    if not settings.stripe_webhook_secret:
        logger.error("STRIPE_WEBHOOK_SECRET is not configured")
        raise HTTPException(
            status_code=500,
            detail={"error": "Webhook secret not configured", "type": "INTERNAL_SERVER_ERROR"},
        )

    payload = await request.body()

    try:
        result = await run_in_threadpool(
            handle_payment_event,
            payload,
            stripe_signature,
            webhook_secret=settings.stripe_webhook_secret,
            tolerance_seconds=settings.stripe_webhook_tolerance_seconds,
            on_created=FraudDispatcher(background_tasks).enqueue,
        )
    except SignatureVerificationError as e:
        logger.warning(f"Webhook signature verification failed: {e}")
        raise to_http_exception(e)
    except SettlementError as e:
        raise to_http_exception(e)
    except Exception:
        raise internal_error("process payment webhook")

    if not result.handled or result.order is None:
        return WebhookAcknowledgedResponse()

    return WebhookProcessedResponse(order_id=result.order.order_id)
