"""Checkout router: session creation and post-payment verification."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request
from libs.common.errors import ProviderError, ValidationError
from libs.common.logging import get_logger
from libs.common.rate_limit import payment_limit
from services.store_service.checkout import CheckoutSessionBuilder
from services.store_service.dependencies import (
    get_checkout_builder,
    get_origin,
    get_stripe_client,
)
from services.store_service.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    CheckoutVerifyResponse,
)
from services.store_service.stripe_client import StripeClient

router = APIRouter(prefix="/checkout", tags=["checkout"])
logger = get_logger(__name__)


@router.post("", response_model=CheckoutResponse)
@payment_limit
async def create_checkout(
    request: Request,
    payload: CheckoutRequest,
    builder: Annotated[CheckoutSessionBuilder, Depends(get_checkout_builder)],
    origin: Annotated[str, Depends(get_origin)],
):
    """
    Create a hosted checkout session for the submitted cart.

    Only product slugs, quantities and variant ids are read from the body;
    prices come from the catalog.
    """
    result = await builder.create_session(
        payload.items,
        origin,
        success_url=payload.success_url,
        cancel_url=payload.cancel_url,
    )
    return CheckoutResponse(session_id=result.session_id, url=result.url)


@router.get(
    "/verify",
    response_model=CheckoutVerifyResponse,
    response_model_exclude_none=True,
)
async def verify_checkout(
    stripe_client: Annotated[StripeClient, Depends(get_stripe_client)],
    session_id: Optional[str] = Query(None),
):
    """Report whether a returning customer's session has been paid."""
    if not session_id:
        raise ValidationError("Missing session_id parameter")

    try:
        session = await stripe_client.retrieve_checkout_session(session_id)
    except ProviderError as e:
        logger.warning("Session verification failed for %s: %s", session_id, e.message)
        raise ValidationError("Invalid session") from e

    payment_status = session.get("payment_status")
    if payment_status == "paid":
        details = session.get("customer_details") or {}
        return CheckoutVerifyResponse(verified=True, customer_email=details.get("email"))
    return CheckoutVerifyResponse(verified=False, status=payment_status)
