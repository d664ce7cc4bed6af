"""Customer self-service billing portal."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from libs.common.errors import NotFoundError, ValidationError
from libs.common.rate_limit import payment_limit
from services.store_service.dependencies import get_origin, get_stripe_client
from services.store_service.schemas import PortalRequest, PortalResponse
from services.store_service.stripe_client import StripeClient

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("/portal", response_model=PortalResponse)
@payment_limit
async def create_portal_session(
    request: Request,
    payload: PortalRequest,
    stripe_client: Annotated[StripeClient, Depends(get_stripe_client)],
    origin: Annotated[str, Depends(get_origin)],
):
    """Open the Stripe billing portal for the customer with this email."""
    if not payload.email:
        raise ValidationError("Email is required")

    customer = await stripe_client.find_customer_by_email(payload.email)
    if customer is None:
        raise NotFoundError("No subscriptions found for this email")

    url = await stripe_client.create_billing_portal_session(
        customer["id"], payload.return_url or f"{origin}/shop"
    )
    return PortalResponse(url=url)
