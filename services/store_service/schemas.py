"""Pydantic schemas for store service requests and responses."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.store_service.models import (
    OrderStatus,
    Product,
    ProductType,
    SubscriptionStatus,
)
from services.store_service.models.base import ContentModel

# ============================================================================
# CATALOG SCHEMAS
# ============================================================================


class ProductFilters(BaseModel):
    category: Optional[str] = None
    tag: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    in_stock: bool = False
    product_type: Optional[ProductType] = None
    q: Optional[str] = None


class AccessCodeResponse(ContentModel):
    product: Product


# ============================================================================
# CHECKOUT SCHEMAS
# ============================================================================


class CheckoutProductRef(ContentModel):
    """Only the slug of a submitted product is trusted; prices are re-read."""

    model_config = ConfigDict(extra="ignore")

    slug: str = Field(..., min_length=1)


class CheckoutItemIn(ContentModel):
    product: CheckoutProductRef
    quantity: int = Field(1, ge=1)
    variant_id: Optional[str] = None


class CheckoutRequest(ContentModel):
    items: list[CheckoutItemIn] = []
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None


class CheckoutResponse(ContentModel):
    session_id: str
    url: str


class CheckoutVerifyResponse(ContentModel):
    verified: bool
    customer_email: Optional[str] = None
    status: Optional[str] = None


# ============================================================================
# SUBSCRIPTION PORTAL SCHEMAS
# ============================================================================


class PortalRequest(ContentModel):
    email: Optional[str] = None
    return_url: Optional[str] = None


class PortalResponse(ContentModel):
    url: str


# ============================================================================
# WEBHOOK SCHEMAS
# ============================================================================


class WebhookAck(ContentModel):
    received: bool = True


# ============================================================================
# DASHBOARD SCHEMAS
# ============================================================================


class OrderStats(ContentModel):
    total_orders: int
    recent_orders: int
    total_revenue: int
    recent_revenue: int
    average_order_value: int
    orders_by_status: dict[OrderStatus, int]


class SubscriptionStats(ContentModel):
    total_subscriptions: int
    active_subscriptions: int
    trialing_subscriptions: int
    canceled_subscriptions: int
    past_due_subscriptions: int
    recent_cancellations: int
    mrr: int
    arr: int
    subscriptions_by_status: dict[SubscriptionStatus, int]
