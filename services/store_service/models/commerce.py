"""Store commerce models: orders and subscriptions recorded from webhooks."""

import random
import string
import time
from datetime import datetime
from typing import Annotated, Optional

from libs.common.datetime_utils import ensure_utc, utc_now
from pydantic import AfterValidator, Field
from services.store_service.models.base import ContentModel
from services.store_service.models.enums import (
    BillingInterval,
    OrderStatus,
    ProductType,
    SubscriptionStatus,
)

_BASE36 = string.digits + string.ascii_uppercase

UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


def _base36(number: int) -> str:
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


def generate_record_id(prefix: str) -> str:
    """Generate an id like ORD-MGX3K2A1-4F7Q2Z (ms timestamp + random suffix).

    Collisions are not checked; the random suffix makes them improbable.
    """
    timestamp = _base36(int(time.time() * 1000))
    random_part = "".join(random.choices(_BASE36, k=6))
    return f"{prefix}-{timestamp}-{random_part}"


# ============================================================================
# ORDER MODELS
# ============================================================================


class OrderCustomer(ContentModel):
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None


class ShippingAddress(ContentModel):
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class OrderShipping(ContentModel):
    name: Optional[str] = None
    address: Optional[ShippingAddress] = None


class OrderItem(ContentModel):
    """Order line snapshot; amounts in minor units."""

    product_slug: str
    product_name: str
    product_type: ProductType = ProductType.PHYSICAL
    quantity: int = Field(1, ge=1)
    unit_price: int = 0
    total_price: int = 0
    sku: Optional[str] = None


class Order(ContentModel):
    """Orders, created once per completed checkout session."""

    id: str
    stripe_session_id: str  # idempotency key
    stripe_payment_intent_id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    customer: OrderCustomer
    items: list[OrderItem] = []
    shipping: Optional[OrderShipping] = None
    subtotal: int = 0
    total: int = 0
    currency: str = "USD"
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)
    notes: Optional[str] = None
    metadata: Optional[dict[str, str]] = None

    @staticmethod
    def generate_id() -> str:
        return generate_record_id("ORD")

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def __repr__(self):
        return f"<Order {self.id} status={self.status.value}>"


# ============================================================================
# SUBSCRIPTION MODELS
# ============================================================================


class SubscriptionCustomer(ContentModel):
    email: str
    name: Optional[str] = None


class Subscription(ContentModel):
    """Local mirror of a provider subscription, one per external id."""

    id: str
    stripe_subscription_id: str
    stripe_customer_id: str
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    customer: SubscriptionCustomer
    product_slug: str
    product_name: str
    amount: int = 0  # minor units per billing interval
    currency: str = "USD"
    interval: BillingInterval = BillingInterval.MONTH
    interval_count: int = Field(1, ge=1)
    current_period_start: UtcDatetime
    current_period_end: UtcDatetime
    canceled_at: Optional[UtcDatetime] = None
    trial_end: Optional[UtcDatetime] = None
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)
    metadata: Optional[dict[str, str]] = None

    @staticmethod
    def generate_id() -> str:
        return generate_record_id("SUB")

    @property
    def monthly_amount(self) -> float:
        """Amount normalised to one month, in minor units."""
        if self.interval == BillingInterval.YEAR:
            return self.amount / (12 * self.interval_count)
        return self.amount / self.interval_count

    def __repr__(self):
        return f"<Subscription {self.id} status={self.status.value}>"
