"""
Payment confirmation ingestion (Stripe Checkout webhooks).

The payment processor delivers a signed `checkout.session.completed` event
whose session metadata carries the product, the rates computed at checkout
and the affiliate attribution. The processor may redeliver the same event,
so ingestion is idempotent on the checkout session id:

- an existing order for the session is reused (no-op)
- a unique violation on insert (two deliveries racing) resolves to the
  row the other delivery wrote
- payout generation for the order is itself idempotent

Signature scheme (Stripe): header `t=<unix ts>,v1=<hex>[,v1=<hex>...]`
where each v1 is HMAC-SHA256(secret, "<t>.<raw body>").
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional
from uuid import UUID

from postgrest.exceptions import APIError

from domain.order import Order, OrderSource, OrderStatus
from repositories.client import is_unique_violation
from repositories.order_repository import get_order_by_session_id, insert_order
from services.errors import SignatureVerificationError, ValidationError
from services.payout_service import generate_payout_for_order

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
DEFAULT_TOLERANCE_SECONDS = 300


@dataclass(frozen=True, slots=True)
class CheckoutConfirmation:
    """
    Fields extracted from a completed checkout session.

    Rates are kept as sent; they are parsed when the payout is split, so a
    malformed rate fails the payout but never the order.
    """
    session_id: str
    product_id: UUID
    amount: int
    creator_rate: Any
    platform_rate: Any
    owner_id: Optional[UUID] = None
    creator_id: Optional[UUID] = None
    affiliate_link_id: Optional[UUID] = None
    payment_intent_id: Optional[str] = None
    product_name: Optional[str] = None
    unit_price: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ConfirmationResult:
    """
    handled: False for event types this service ignores
    order: the order for the session (new or pre-existing) when handled
    """
    event_type: str
    handled: bool
    order: Optional[Order] = None


def verify_signature(
    payload: bytes,
    signature_header: Optional[str],
    secret: str,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
    now: Optional[float] = None,
) -> None:
    """
    Verify a Stripe-style webhook signature.

    Raises:
        SignatureVerificationError: If the header is missing or malformed,
            the timestamp is outside the tolerance, or no v1 signature matches
    """
    if not signature_header:
        raise SignatureVerificationError("Missing signature header")

    timestamp: Optional[int] = None
    signatures: list[str] = []
    for item in signature_header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                raise SignatureVerificationError("Malformed signature timestamp") from None
        elif key == "v1" and value:
            signatures.append(value)

    if timestamp is None or not signatures:
        raise SignatureVerificationError("Malformed signature header")

    current = time.time() if now is None else now
    if tolerance_seconds > 0 and current - timestamp > tolerance_seconds:
        raise SignatureVerificationError("Signature timestamp outside the tolerance zone")

    signed_payload = f"{timestamp}.".encode() + payload
    expected = hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()

    if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
        logger.warning("Invalid webhook signature")
        raise SignatureVerificationError("No signatures found matching the expected signature")


def _optional_uuid(metadata: Mapping[str, Any], key: str) -> Optional[UUID]:
    value = metadata.get(key)
    if not value:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid {key} in metadata") from None


def parse_checkout_session(session: Mapping[str, Any]) -> CheckoutConfirmation:
    """
    Extract the confirmation fields from a checkout session object.

    Raises:
        ValidationError: If metadata, product_id, session id or a positive
            amount_total is missing, or a field is malformed
    """
    metadata = session.get("metadata")
    if not metadata:
        raise ValidationError("Missing metadata")
    if not isinstance(metadata, dict):
        raise ValidationError("Invalid metadata")

    session_id = session.get("id")
    product_id = _optional_uuid(metadata, "product_id")
    amount = session.get("amount_total")

    if not session_id or product_id is None or not amount:
        raise ValidationError("Missing required fields")
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError("amount_total must be a positive integer")

    price = metadata.get("product_price")
    try:
        unit_price = int(price) if price not in (None, "") else None
    except (TypeError, ValueError):
        raise ValidationError("Invalid product_price in metadata") from None

    payment_intent = session.get("payment_intent")

    return CheckoutConfirmation(
        session_id=str(session_id),
        product_id=product_id,
        amount=amount,
        creator_rate=metadata.get("creator_share_rate"),
        platform_rate=metadata.get("platform_take_rate"),
        owner_id=_optional_uuid(metadata, "owner_id"),
        creator_id=_optional_uuid(metadata, "creator_id"),
        affiliate_link_id=_optional_uuid(metadata, "affiliate_link_id"),
        payment_intent_id=str(payment_intent) if payment_intent else None,
        product_name=metadata.get("product_name") or None,
        unit_price=unit_price,
    )


def record_confirmed_order(
    confirmation: CheckoutConfirmation,
    on_created: Optional[Callable[[Order], None]] = None,
) -> Order:
    """
    Record the order for a confirmed checkout session exactly once.

    Returns:
        The session's order, whether created now or by an earlier delivery
    """
    existing = get_order_by_session_id(confirmation.session_id)
    if existing is not None:
        logger.info(
            "Checkout session already recorded, reusing order",
            extra={"order_id": str(existing.order_id), "session_id": confirmation.session_id},
        )
        return existing

    try:
        order = insert_order(
            product_id=confirmation.product_id,
            amount=confirmation.amount,
            creator_id=confirmation.creator_id,
            status=OrderStatus.COMPLETED,
            source=OrderSource.STRIPE,
            payment_session_id=confirmation.session_id,
            affiliate_link_id=confirmation.affiliate_link_id,
            payment_intent_id=confirmation.payment_intent_id,
            product_name=confirmation.product_name,
            unit_price=confirmation.unit_price,
        )
    except APIError as exc:
        if not is_unique_violation(exc):
            raise
        existing = get_order_by_session_id(confirmation.session_id)
        if existing is None:
            raise
        logger.info("Checkout session recorded concurrently, reusing order", extra={"session_id": confirmation.session_id})
        return existing

    logger.info(
        "Order created",
        extra={"order_id": str(order.order_id), "session_id": confirmation.session_id, "source": "stripe"},
    )

    if on_created is not None:
        on_created(order)

    return order


def handle_payment_event(
    payload: bytes,
    signature_header: Optional[str],
    *,
    webhook_secret: str,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
    now: Optional[float] = None,
    on_created: Optional[Callable[[Order], None]] = None,
) -> ConfirmationResult:
    """
    Verify and ingest a payment processor event.

    Process:
    1. Verify the signature over the raw body
    2. Ignore (acknowledge) event types other than checkout.session.completed
    3. Record the order for the session idempotently
    4. Generate the order's payout with the rates fixed at checkout; a
       payout failure is logged and left to the batch generator

    Args:
        payload: Raw request body
        signature_header: Value of the Stripe-Signature header
        webhook_secret: Endpoint signing secret
        tolerance_seconds: Maximum accepted signature age
        now: Current unix time (tests)
        on_created: Called only when the order is newly created

    Returns:
        ConfirmationResult

    Raises:
        SignatureVerificationError: Bad signature
        ValidationError: Malformed event or missing required fields
    """
    verify_signature(payload, signature_header, webhook_secret, tolerance_seconds, now)

    try:
        event = json.loads(payload)
    except ValueError:
        raise ValidationError("Invalid JSON payload") from None
    if not isinstance(event, dict):
        raise ValidationError("Invalid event payload")

    event_type = str(event.get("type") or "")
    if event_type != CHECKOUT_COMPLETED:
        logger.info(f"Unhandled event type: {event_type}")
        return ConfirmationResult(event_type=event_type, handled=False)

    data = event.get("data")
    session = data.get("object") if isinstance(data, dict) else None
    if not isinstance(session, dict):
        raise ValidationError("Missing checkout session")

    confirmation = parse_checkout_session(session)
    order = record_confirmed_order(confirmation, on_created=on_created)

    try:
        generate_payout_for_order(
            order,
            brand_id=confirmation.owner_id,
            creator_rate=confirmation.creator_rate,
            platform_rate=confirmation.platform_rate,
        )
    except (ValidationError, APIError, RuntimeError):
        # The order is durable; the batch generator retries the payout.
        logger.exception("Payout creation failed", extra={"order_id": str(order.order_id)})

    return ConfirmationResult(event_type=event_type, handled=True, order=order)


__all__ = [
    "CheckoutConfirmation",
    "ConfirmationResult",
    "verify_signature",
    "parse_checkout_session",
    "record_confirmed_order",
    "handle_payment_event",
]
