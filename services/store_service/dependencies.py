"""FastAPI dependencies wiring settings to the store's collaborators."""

from typing import Annotated, Optional

from fastapi import Depends, Request
from libs.common.config import Settings, get_settings
from libs.common.errors import ConfigurationError
from services.store_service.catalog import ProductCatalog
from services.store_service.checkout import CheckoutSessionBuilder
from services.store_service.repositories import OrderRepository, SubscriptionRepository
from services.store_service.stripe_client import StripeClient

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_optional_stripe_client(settings: SettingsDep) -> Optional[StripeClient]:
    """Stripe client for the configured key, or None when no key is set."""
    if not settings.STRIPE_SECRET_KEY:
        return None
    return StripeClient(settings.STRIPE_SECRET_KEY)


OptionalStripeDep = Annotated[Optional[StripeClient], Depends(get_optional_stripe_client)]


def get_stripe_client(stripe_client: OptionalStripeDep) -> StripeClient:
    if stripe_client is None:
        raise ConfigurationError("Stripe is not configured")
    return stripe_client


def get_catalog(
    settings: SettingsDep, stripe_client: OptionalStripeDep
) -> ProductCatalog:
    return ProductCatalog(
        settings.products_dir,
        stripe_client=stripe_client,
        test_mode=settings.stripe_test_mode,
    )


def get_order_repository(settings: SettingsDep) -> OrderRepository:
    return OrderRepository(settings.orders_dir)


def get_subscription_repository(settings: SettingsDep) -> SubscriptionRepository:
    return SubscriptionRepository(settings.subscriptions_dir)


def get_checkout_builder(
    settings: SettingsDep,
    catalog: Annotated[ProductCatalog, Depends(get_catalog)],
    stripe_client: Annotated[StripeClient, Depends(get_stripe_client)],
) -> CheckoutSessionBuilder:
    return CheckoutSessionBuilder(
        catalog,
        stripe_client,
        currency=settings.STORE_CURRENCY,
        shipping_countries=settings.SHIPPING_COUNTRIES,
        test_mode=settings.stripe_test_mode,
    )


def get_origin(request: Request, settings: SettingsDep) -> str:
    """Request Origin header, else the configured site URL."""
    origin = request.headers.get("origin")
    return origin.rstrip("/") if origin else settings.SITE_URL
