"""
Webhook order recorder.

The checkout webhook is the only writer of orders: a completed session
becomes exactly one order keyed by the session id, and subscription
lifecycle events keep the local subscription mirror in step. Failures
while building a record are logged and swallowed so the webhook is still
acknowledged.
"""

from typing import Any, Mapping, Optional

from libs.common.datetime_utils import from_unix, utc_now
from libs.common.logging import get_logger
from services.store_service.models import (
    BillingInterval,
    Order,
    OrderCustomer,
    OrderItem,
    OrderShipping,
    OrderStatus,
    ProductType,
    ShippingAddress,
    Subscription,
    SubscriptionCustomer,
    SubscriptionStatus,
)
from services.store_service.repositories import OrderRepository, SubscriptionRepository
from services.store_service.stripe_client import StripeClient
from services.store_service.webhooks.events import (
    ChargeRefunded,
    CheckoutSessionCompleted,
    CheckoutSessionExpired,
    InvoicePaid,
    InvoicePaymentFailed,
    StoreEvent,
    StripeCheckoutSession,
    StripeShippingDetails,
    StripeSubscription,
    SubscriptionCreated,
    SubscriptionDeleted,
    SubscriptionUpdated,
    object_id,
)

logger = get_logger(__name__)

STRIPE_SUBSCRIPTION_STATUSES: dict[str, SubscriptionStatus] = {
    "active": SubscriptionStatus.ACTIVE,
    "past_due": SubscriptionStatus.PAST_DUE,
    "canceled": SubscriptionStatus.CANCELED,
    "unpaid": SubscriptionStatus.PAST_DUE,
    "trialing": SubscriptionStatus.TRIALING,
    "incomplete": SubscriptionStatus.PAST_DUE,
    "incomplete_expired": SubscriptionStatus.CANCELED,
    "paused": SubscriptionStatus.PAUSED,
}


def map_subscription_status(
    stripe_status: str, default: SubscriptionStatus = SubscriptionStatus.ACTIVE
) -> SubscriptionStatus:
    return STRIPE_SUBSCRIPTION_STATUSES.get(stripe_status, default)


def order_item_from_line_item(line_item: Mapping[str, Any]) -> OrderItem:
    """Build an order line from a session line item with ``price.product`` expanded."""
    price = line_item.get("price") or {}
    product = price.get("product")
    if not isinstance(product, Mapping):
        product = {}
    metadata = product.get("metadata") or {}

    try:
        product_type = ProductType(metadata.get("productType"))
    except ValueError:
        product_type = ProductType.PHYSICAL

    return OrderItem(
        product_slug=metadata.get("productSlug") or product.get("name") or "unknown",
        product_name=product.get("name")
        or line_item.get("description")
        or "Unknown Product",
        product_type=product_type,
        quantity=line_item.get("quantity") or 1,
        unit_price=price.get("unit_amount") or 0,
        total_price=line_item.get("amount_total") or 0,
        sku=metadata.get("sku") or None,
    )


def order_shipping(details: Optional[StripeShippingDetails]) -> Optional[OrderShipping]:
    if details is None:
        return None
    address = None
    if details.address is not None:
        address = ShippingAddress(
            line1=details.address.line1 or None,
            line2=details.address.line2 or None,
            city=details.address.city or None,
            state=details.address.state or None,
            postal_code=details.address.postal_code or None,
            country=details.address.country or None,
        )
    return OrderShipping(name=details.name or None, address=address)


class WebhookRecorder:
    """Applies verified webhook events to the order and subscription stores."""

    def __init__(
        self,
        stripe_client: StripeClient,
        orders: OrderRepository,
        subscriptions: SubscriptionRepository,
    ):
        self.stripe_client = stripe_client
        self.orders = orders
        self.subscriptions = subscriptions

    async def handle(self, event: StoreEvent) -> None:
        if isinstance(event, CheckoutSessionCompleted):
            await self.record_checkout(event.session)
        elif isinstance(event, CheckoutSessionExpired):
            logger.info("Checkout session expired: %s", event.session.id)
        elif isinstance(event, ChargeRefunded):
            logger.info(
                "Charge refunded: %s",
                event.charge.id,
                extra={
                    "extra_fields": {
                        "payment_intent": object_id(event.charge.payment_intent)
                    }
                },
            )
        elif isinstance(event, SubscriptionCreated):
            await self.record_subscription(event.subscription)
        elif isinstance(event, SubscriptionUpdated):
            self.update_subscription(event.subscription)
        elif isinstance(event, SubscriptionDeleted):
            self.cancel_subscription(event.subscription)
        elif isinstance(event, InvoicePaid):
            logger.info(
                "Invoice paid: %s for subscription %s",
                event.invoice.id,
                event.invoice.subscription_id,
            )
        elif isinstance(event, InvoicePaymentFailed):
            self.mark_past_due(event.invoice.subscription_id, event.invoice.id)
        else:
            logger.debug("Unhandled event type: %s", event.type)

    # =========================================================================
    # Orders
    # =========================================================================

    async def record_checkout(self, session: StripeCheckoutSession) -> Optional[Order]:
        """Create the order for a completed session unless one already exists."""
        existing = self.orders.get_by_session_id(session.id)
        if existing is not None:
            logger.info(
                "Order already exists for session %s: %s", session.id, existing.id
            )
            return None

        try:
            line_items = await self.stripe_client.list_line_items(session.id)
            details = session.customer_details
            order = Order(
                id=Order.generate_id(),
                stripe_session_id=session.id,
                stripe_payment_intent_id=session.payment_intent_id,
                status=(
                    OrderStatus.PAID
                    if session.payment_status == "paid"
                    else OrderStatus.PENDING
                ),
                customer=OrderCustomer(
                    email=(details.email if details else None) or "",
                    name=(details.name if details else None) or None,
                    phone=(details.phone if details else None) or None,
                ),
                items=[order_item_from_line_item(item) for item in line_items],
                shipping=order_shipping(session.shipping),
                subtotal=session.amount_subtotal or 0,
                total=session.amount_total or 0,
                currency=(session.currency or "usd").upper(),
                metadata=session.metadata or None,
            )
            self.orders.save(order)
        except Exception:
            logger.exception(
                "Failed to create order for session %s",
                session.id,
                extra={"extra_fields": {"session_id": session.id}},
            )
            return None

        logger.info(
            "Order created: %s",
            order.id,
            extra={
                "extra_fields": {
                    "order_id": order.id,
                    "session_id": session.id,
                    "status": order.status.value,
                    "total": order.total,
                }
            },
        )
        return order

    # =========================================================================
    # Subscriptions
    # =========================================================================

    async def record_subscription(
        self, stripe_subscription: StripeSubscription
    ) -> Optional[Subscription]:
        existing = self.subscriptions.get_by_stripe_id(stripe_subscription.id)
        if existing is not None:
            logger.info(
                "Subscription already exists for %s: %s",
                stripe_subscription.id,
                existing.id,
            )
            return None

        try:
            customer_id = stripe_subscription.customer_id
            customer = await self.stripe_client.retrieve_customer(customer_id)

            price = stripe_subscription.first_item.get("price") or {}
            product_id = object_id(price.get("product"))
            product = (
                await self.stripe_client.retrieve_product(product_id)
                if product_id
                else {}
            )
            product_metadata = product.get("metadata") or {}
            recurring = price.get("recurring") or {}

            subscription = Subscription(
                id=Subscription.generate_id(),
                stripe_subscription_id=stripe_subscription.id,
                stripe_customer_id=customer_id,
                status=map_subscription_status(stripe_subscription.status),
                customer=SubscriptionCustomer(
                    email=customer.get("email") or "",
                    name=customer.get("name") or None,
                ),
                product_slug=product_metadata.get("productSlug")
                or product.get("name")
                or "unknown",
                product_name=product.get("name") or "Unknown Product",
                amount=price.get("unit_amount") or 0,
                currency=(price.get("currency") or "usd").upper(),
                interval=BillingInterval(recurring.get("interval") or "month"),
                interval_count=recurring.get("interval_count") or 1,
                current_period_start=from_unix(stripe_subscription.period_start)
                or utc_now(),
                current_period_end=from_unix(stripe_subscription.period_end)
                or utc_now(),
                trial_end=from_unix(stripe_subscription.trial_end),
                metadata=stripe_subscription.metadata or None,
            )
            self.subscriptions.save(subscription)
        except Exception:
            logger.exception(
                "Failed to create subscription record for %s", stripe_subscription.id
            )
            return None

        logger.info(
            "Subscription saved: %s",
            subscription.id,
            extra={
                "extra_fields": {
                    "subscription_id": subscription.id,
                    "stripe_subscription_id": stripe_subscription.id,
                    "status": subscription.status.value,
                }
            },
        )
        return subscription

    def update_subscription(
        self, stripe_subscription: StripeSubscription
    ) -> Optional[Subscription]:
        local = self.subscriptions.get_by_stripe_id(stripe_subscription.id)
        if local is None:
            logger.info("Update for unknown subscription %s", stripe_subscription.id)
            return None

        changes: dict[str, Any] = {
            "status": map_subscription_status(stripe_subscription.status, local.status),
            "canceled_at": from_unix(stripe_subscription.canceled_at),
        }
        if stripe_subscription.period_start:
            changes["current_period_start"] = from_unix(stripe_subscription.period_start)
        if stripe_subscription.period_end:
            changes["current_period_end"] = from_unix(stripe_subscription.period_end)

        updated = self.subscriptions.update(local.id, **changes)
        logger.info("Subscription updated: %s", local.id)
        return updated

    def cancel_subscription(
        self, stripe_subscription: StripeSubscription
    ) -> Optional[Subscription]:
        local = self.subscriptions.get_by_stripe_id(stripe_subscription.id)
        if local is None:
            return None
        updated = self.subscriptions.update(
            local.id, status=SubscriptionStatus.CANCELED, canceled_at=utc_now()
        )
        logger.info("Subscription canceled: %s", local.id)
        return updated

    def mark_past_due(
        self, stripe_subscription_id: Optional[str], invoice_id: Optional[str] = None
    ) -> Optional[Subscription]:
        logger.info(
            "Invoice payment failed: %s for subscription %s",
            invoice_id,
            stripe_subscription_id,
        )
        if not stripe_subscription_id:
            return None
        local = self.subscriptions.get_by_stripe_id(stripe_subscription_id)
        if local is None:
            return None
        updated = self.subscriptions.update(local.id, status=SubscriptionStatus.PAST_DUE)
        logger.info("Subscription marked as past_due: %s", local.id)
        return updated
