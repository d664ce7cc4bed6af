"""
Checkout session builder.

Turns a submitted cart (slugs and quantities) into a hosted Stripe Checkout
Session. Every product is re-read from the catalog so that the prices sent
to the provider come from the server, never from the request body.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from libs.common.currency import to_minor_units
from libs.common.errors import NotFoundError, ValidationError
from libs.common.logging import get_logger
from services.store_service.catalog import ProductCatalog
from services.store_service.models import CheckoutMode, Product
from services.store_service.schemas import CheckoutItemIn
from services.store_service.stripe_client import StripeClient

logger = get_logger(__name__)

MIXED_CART_MESSAGE = (
    "Subscription products must be checked out separately from one-time purchases"
)


@dataclass
class ResolvedItem:
    product: Product
    quantity: int
    variant_id: Optional[str] = None


@dataclass
class CheckoutResult:
    session_id: str
    url: str
    mode: CheckoutMode
    has_physical_products: bool


class CheckoutSessionBuilder:
    """Builds and submits checkout sessions for one store configuration."""

    def __init__(
        self,
        catalog: ProductCatalog,
        stripe_client: StripeClient,
        *,
        currency: str = "usd",
        shipping_countries: Sequence[str] = ("US", "CA", "GB", "AU"),
        test_mode: bool = False,
    ):
        self.catalog = catalog
        self.stripe_client = stripe_client
        self.currency = currency.lower()
        self.shipping_countries = list(shipping_countries)
        self.test_mode = test_mode

    async def resolve_products(self, items: Sequence[CheckoutItemIn]) -> list[ResolvedItem]:
        """
        Re-fetch each submitted product from the catalog.

        Raises:
            ValidationError: If no items were submitted
            NotFoundError: If any slug is unknown
        """
        if not items:
            raise ValidationError("No items in cart")

        products = await asyncio.gather(
            *(self.catalog.get_product(item.product.slug) for item in items)
        )
        resolved = []
        for item, product in zip(items, products):
            if product is None:
                raise NotFoundError(f"Product not found: {item.product.slug}")
            resolved.append(ResolvedItem(product, item.quantity, item.variant_id))
        return resolved

    @staticmethod
    def classify(resolved: Sequence[ResolvedItem]) -> CheckoutMode:
        """Subscription vs payment mode; a mixed cart is rejected."""
        subscriptions = [r for r in resolved if r.product.is_subscription]
        if subscriptions and len(subscriptions) != len(resolved):
            raise ValidationError(MIXED_CART_MESSAGE)
        return CheckoutMode.SUBSCRIPTION if subscriptions else CheckoutMode.PAYMENT

    def _absolute_image(self, src: str, origin: str) -> str:
        if src.startswith("http"):
            return src
        return f"{origin}{src}"

    def build_line_item(self, resolved: ResolvedItem, origin: str) -> dict[str, Any]:
        product = resolved.product
        price_data: dict[str, Any] = {
            "currency": self.currency,
            "unit_amount": to_minor_units(product.pricing.price),
        }

        external_id = product.external_product_id(self.test_mode)
        if external_id:
            price_data["product"] = external_id
        else:
            product_data: dict[str, Any] = {
                "name": product.name,
                "metadata": {
                    "productSlug": product.slug,
                    "productType": product.product_type.value,
                    "sku": product.sku,
                },
            }
            if resolved.variant_id:
                product_data["metadata"]["variantId"] = resolved.variant_id
            if product.description:
                product_data["description"] = product.description
            if product.images:
                product_data["images"] = [
                    self._absolute_image(image.src, origin) for image in product.images
                ]
            price_data["product_data"] = product_data

        if product.subscription:
            price_data["recurring"] = {
                "interval": product.subscription.interval.value,
                "interval_count": product.subscription.interval_count,
            }

        return {"price_data": price_data, "quantity": resolved.quantity}

    def build_params(
        self,
        resolved: Sequence[ResolvedItem],
        origin: str,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ) -> dict[str, Any]:
        """Checkout Sessions API parameters for an already-resolved cart."""
        mode = self.classify(resolved)
        has_physical = any(r.product.is_physical for r in resolved)

        params: dict[str, Any] = {
            "payment_method_types": ["card"],
            "line_items": [self.build_line_item(r, origin) for r in resolved],
            "mode": mode.value,
            "success_url": success_url
            or f"{origin}/shop/success?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": cancel_url or f"{origin}/shop/cart",
            "billing_address_collection": "auto",
            "allow_promotion_codes": True,
            "metadata": {
                "itemCount": str(sum(r.quantity for r in resolved)),
                "hasPhysicalProducts": "true" if has_physical else "false",
            },
        }

        if has_physical:
            params["shipping_address_collection"] = {
                "allowed_countries": self.shipping_countries
            }

        if mode == CheckoutMode.SUBSCRIPTION:
            # First subscription product decides the trial, even if later ones differ
            first = next(r.product for r in resolved if r.product.is_subscription)
            trial_days = first.subscription.trial_days
            if trial_days:
                params["subscription_data"] = {"trial_period_days": trial_days}

        return params

    async def create_session(
        self,
        items: Sequence[CheckoutItemIn],
        origin: str,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ) -> CheckoutResult:
        """
        Resolve, validate and submit a cart.

        Args:
            items: Submitted cart lines (only slug, quantity and variant are used)
            origin: Site origin for default redirect URLs and relative images
            success_url: Override for the post-payment redirect
            cancel_url: Override for the abandon redirect

        Returns:
            CheckoutResult with the provider session id and redirect URL

        Raises:
            ValidationError: Empty or mixed cart
            NotFoundError: Unknown product slug
            ProviderError: The provider rejected the session
        """
        resolved = await self.resolve_products(items)
        params = self.build_params(resolved, origin, success_url, cancel_url)
        session = await self.stripe_client.create_checkout_session(params)

        logger.info(
            "Checkout session created",
            extra={
                "extra_fields": {
                    "session_id": session.id,
                    "mode": params["mode"],
                    "item_count": params["metadata"]["itemCount"],
                }
            },
        )
        return CheckoutResult(
            session_id=session.id,
            url=session.url,
            mode=CheckoutMode(params["mode"]),
            has_physical_products=params["metadata"]["hasPhysicalProducts"] == "true",
        )
