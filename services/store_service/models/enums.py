"""Enum definitions for store service models."""

import enum


class ProductType(str, enum.Enum):
    PHYSICAL = "physical"
    DIGITAL = "digital"
    SERVICE = "service"


class ProductStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class BillingInterval(str, enum.Enum):
    MONTH = "month"
    YEAR = "year"


class CheckoutMode(str, enum.Enum):
    PAYMENT = "payment"
    SUBSCRIPTION = "subscription"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FULFILLED = "fulfilled"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    PAUSED = "paused"
    TRIALING = "trialing"


class SortOption(str, enum.Enum):
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NEWEST = "newest"


# Statuses counted as realised revenue in order stats
REVENUE_ORDER_STATUSES = frozenset({OrderStatus.PAID, OrderStatus.FULFILLED})

# Statuses counted as live recurring revenue
BILLABLE_SUBSCRIPTION_STATUSES = frozenset(
    {SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING}
)
