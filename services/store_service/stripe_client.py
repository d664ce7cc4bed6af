"""
Stripe API client for checkout, catalog lookups and the billing portal.

Wraps the synchronous ``stripe`` SDK behind async methods (each call runs in
a worker thread) and converts SDK failures into ``ProviderError`` so routers
can surface the provider's message.

Provides async methods for:
- Creating and retrieving Checkout Sessions
- Listing a session's line items (with expanded products)
- Retrieving products and customers
- Looking up a customer by email and opening a billing portal session
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import stripe
from libs.common.config import get_settings
from libs.common.errors import ConfigurationError, ProviderError, SignatureError
from libs.common.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CreatedCheckoutSession:
    """Result of creating a hosted checkout session."""

    id: str
    url: str


class StripeClient:
    """Async facade over the Stripe SDK, scoped to one secret key."""

    def __init__(self, secret_key: str = None):
        self.secret_key = secret_key or get_settings().STRIPE_SECRET_KEY
        if not self.secret_key:
            raise ConfigurationError("STRIPE_SECRET_KEY is not set")

    @property
    def test_mode(self) -> bool:
        return self.secret_key.startswith("sk_test_")

    async def _call(self, method, *args, **kwargs) -> Any:
        """Run a blocking SDK call off the event loop."""
        try:
            return await asyncio.to_thread(
                method, *args, api_key=self.secret_key, **kwargs
            )
        except stripe.StripeError as e:
            message = e.user_message or str(e) or "Stripe request failed"
            logger.error(
                "Stripe API error: %s",
                message,
                extra={
                    "extra_fields": {
                        "stripe_code": e.code,
                        "http_status": e.http_status,
                    }
                },
            )
            raise ProviderError(message, code=e.code) from e

    # =========================================================================
    # Checkout
    # =========================================================================

    async def create_checkout_session(
        self, params: Mapping[str, Any]
    ) -> CreatedCheckoutSession:
        """
        Create a hosted Checkout Session.

        Args:
            params: Session parameters as accepted by the Checkout Sessions API

        Returns:
            CreatedCheckoutSession with the session id and redirect URL
        """
        session = await self._call(stripe.checkout.Session.create, **params)
        return CreatedCheckoutSession(id=session["id"], url=session["url"])

    async def retrieve_checkout_session(self, session_id: str) -> Mapping[str, Any]:
        return await self._call(stripe.checkout.Session.retrieve, session_id)

    async def list_line_items(self, session_id: str) -> list[Mapping[str, Any]]:
        """Line items of a session, each with ``price.product`` expanded."""
        result = await self._call(
            stripe.checkout.Session.list_line_items,
            session_id,
            expand=["data.price.product"],
            limit=100,
        )
        return list(result["data"])

    # =========================================================================
    # Catalog & customers
    # =========================================================================

    async def retrieve_product(self, product_id: str) -> Mapping[str, Any]:
        """Retrieve a product with its default price expanded."""
        return await self._call(
            stripe.Product.retrieve, product_id, expand=["default_price"]
        )

    async def retrieve_customer(self, customer_id: str) -> Mapping[str, Any]:
        return await self._call(stripe.Customer.retrieve, customer_id)

    async def find_customer_by_email(self, email: str) -> Optional[Mapping[str, Any]]:
        customers = await self._call(stripe.Customer.list, email=email, limit=1)
        data = customers["data"]
        return data[0] if data else None

    async def create_billing_portal_session(
        self, customer_id: str, return_url: str
    ) -> str:
        """Open a customer billing portal session and return its URL."""
        session = await self._call(
            stripe.billing_portal.Session.create,
            customer=customer_id,
            return_url=return_url,
        )
        return session["url"]


def construct_event(payload: bytes, signature: str, secret: str) -> dict[str, Any]:
    """
    Verify a webhook signature over the raw body and return the event payload.

    Verification runs before the body is parsed; the returned dict is the
    plain decoded JSON event.

    Raises:
        SignatureError: If the header does not match the payload or is stale
    """
    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SignatureError("Webhook Error: invalid payload encoding") from e

    try:
        stripe.WebhookSignature.verify_header(
            body, signature, secret, tolerance=stripe.Webhook.DEFAULT_TOLERANCE
        )
    except stripe.SignatureVerificationError as e:
        raise SignatureError(f"Webhook Error: {e}") from e

    try:
        event = json.loads(body)
    except ValueError as e:
        raise SignatureError(f"Webhook Error: invalid payload ({e})") from e
    if not isinstance(event, dict):
        raise SignatureError("Webhook Error: invalid payload")
    return event
