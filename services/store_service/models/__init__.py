"""Store Service models package."""

from services.store_service.models.catalog import (
    Product,
    ProductImage,
    ProductInventory,
    ProductPricing,
    ProductVariant,
    SubscriptionDetails,
)
from services.store_service.models.commerce import (
    Order,
    OrderCustomer,
    OrderItem,
    OrderShipping,
    ShippingAddress,
    Subscription,
    SubscriptionCustomer,
    generate_record_id,
)
from services.store_service.models.enums import (
    BILLABLE_SUBSCRIPTION_STATUSES,
    REVENUE_ORDER_STATUSES,
    BillingInterval,
    CheckoutMode,
    OrderStatus,
    ProductStatus,
    ProductType,
    SortOption,
    SubscriptionStatus,
)

__all__ = [
    "BILLABLE_SUBSCRIPTION_STATUSES",
    "BillingInterval",
    "CheckoutMode",
    "Order",
    "OrderCustomer",
    "OrderItem",
    "OrderShipping",
    "OrderStatus",
    "Product",
    "ProductImage",
    "ProductInventory",
    "ProductPricing",
    "ProductStatus",
    "ProductType",
    "ProductVariant",
    "REVENUE_ORDER_STATUSES",
    "ShippingAddress",
    "SortOption",
    "Subscription",
    "SubscriptionCustomer",
    "SubscriptionDetails",
    "SubscriptionStatus",
    "generate_record_id",
]
