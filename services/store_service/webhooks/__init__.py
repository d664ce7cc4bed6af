"""Stripe webhook events and the recorder that applies them."""

from services.store_service.webhooks.events import (
    ChargeRefunded,
    CheckoutSessionCompleted,
    CheckoutSessionExpired,
    InvoicePaid,
    InvoicePaymentFailed,
    StoreEvent,
    SubscriptionCreated,
    SubscriptionDeleted,
    SubscriptionUpdated,
    UnrecognizedEvent,
    parse_event,
)
from services.store_service.webhooks.recorder import (
    WebhookRecorder,
    map_subscription_status,
    order_item_from_line_item,
)

__all__ = [
    "ChargeRefunded",
    "CheckoutSessionCompleted",
    "CheckoutSessionExpired",
    "InvoicePaid",
    "InvoicePaymentFailed",
    "StoreEvent",
    "SubscriptionCreated",
    "SubscriptionDeleted",
    "SubscriptionUpdated",
    "UnrecognizedEvent",
    "WebhookRecorder",
    "map_subscription_status",
    "order_item_from_line_item",
    "parse_event",
]
