"""Stripe webhook endpoint."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request
from libs.common.config import Settings, get_settings
from libs.common.errors import ConfigurationError, SignatureError
from libs.common.logging import get_logger
from services.store_service.dependencies import (
    get_optional_stripe_client,
    get_order_repository,
    get_subscription_repository,
)
from services.store_service.repositories import OrderRepository, SubscriptionRepository
from services.store_service.schemas import WebhookAck
from services.store_service.stripe_client import StripeClient, construct_event
from services.store_service.webhooks import WebhookRecorder, parse_event

router = APIRouter(prefix="/webhooks", tags=["webhooks"])
logger = get_logger(__name__)


@router.post("/stripe", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    stripe_client: Annotated[
        Optional[StripeClient], Depends(get_optional_stripe_client)
    ],
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
    subscriptions: Annotated[
        SubscriptionRepository, Depends(get_subscription_repository)
    ],
):
    """
    Stripe webhook endpoint (no auth; verified by the stripe-signature header).

    The signature is checked against the raw body before anything is parsed.
    """
    raw = await request.body()
    signature = request.headers.get("stripe-signature")
    if not signature:
        raise SignatureError("Missing stripe-signature header")

    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("STRIPE_WEBHOOK_SECRET is not set")
        raise ConfigurationError("Webhook not configured")

    try:
        payload = construct_event(raw, signature, settings.STRIPE_WEBHOOK_SECRET)
    except SignatureError as e:
        logger.warning("Webhook signature verification failed: %s", e.message)
        raise

    event = parse_event(payload)
    logger.info(
        "Webhook received: %s",
        event.type,
        extra={"extra_fields": {"event_id": event.id, "event_type": event.type}},
    )

    if stripe_client is None:
        raise ConfigurationError("Stripe is not configured")

    recorder = WebhookRecorder(stripe_client, orders, subscriptions)
    await recorder.handle(event)
    return WebhookAck()
