"""
Typed views of the Stripe webhook events the store reacts to.

``parse_event`` turns a verified event payload (plain decoded JSON) into
one variant per handled event type. Anything else, including a known type
whose ``data.object`` does not have the expected shape, becomes an
``UnrecognizedEvent`` that the recorder ignores.
"""

from typing import Any, Literal, Optional, Union

from libs.common.logging import get_logger
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

logger = get_logger(__name__)


def object_id(value: Any) -> Optional[str]:
    """Id of a Stripe reference that may be a bare id or an expanded object."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return value.get("id")
    return None


class StripeObject(BaseModel):
    model_config = ConfigDict(extra="allow")


# ============================================================================
# EVENT OBJECTS
# ============================================================================


class StripeAddress(StripeObject):
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class StripeShippingDetails(StripeObject):
    name: Optional[str] = None
    address: Optional[StripeAddress] = None


class StripeCustomerDetails(StripeObject):
    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None


class StripeCheckoutSession(StripeObject):
    id: str
    payment_status: Optional[str] = None
    payment_intent: Optional[Union[str, dict]] = None
    customer_details: Optional[StripeCustomerDetails] = None
    amount_subtotal: Optional[int] = None
    amount_total: Optional[int] = None
    currency: Optional[str] = None
    metadata: Optional[dict[str, str]] = None
    shipping_details: Optional[StripeShippingDetails] = None
    collected_information: Optional[dict[str, Any]] = None

    @property
    def payment_intent_id(self) -> Optional[str]:
        return object_id(self.payment_intent)

    @property
    def shipping(self) -> Optional[StripeShippingDetails]:
        """Shipping details from either API version's location."""
        if self.shipping_details is not None:
            return self.shipping_details
        collected = (self.collected_information or {}).get("shipping_details")
        if collected:
            return StripeShippingDetails.model_validate(collected)
        return None


class StripeCharge(StripeObject):
    id: str
    payment_intent: Optional[Union[str, dict]] = None


class StripeSubscription(StripeObject):
    id: str
    customer: Union[str, dict]
    status: str
    items: dict[str, Any] = {}
    current_period_start: Optional[int] = None
    current_period_end: Optional[int] = None
    trial_end: Optional[int] = None
    canceled_at: Optional[int] = None
    metadata: Optional[dict[str, str]] = None

    @property
    def customer_id(self) -> Optional[str]:
        return object_id(self.customer)

    @property
    def first_item(self) -> dict[str, Any]:
        data = self.items.get("data") or []
        return data[0] if data else {}

    @property
    def period_start(self) -> Optional[int]:
        """Period bounds live on the subscription or, in newer API versions, its items."""
        return self.current_period_start or self.first_item.get("current_period_start")

    @property
    def period_end(self) -> Optional[int]:
        return self.current_period_end or self.first_item.get("current_period_end")


class StripeInvoice(StripeObject):
    id: Optional[str] = None
    subscription: Optional[Union[str, dict]] = None
    parent: Optional[dict[str, Any]] = None

    @property
    def subscription_id(self) -> Optional[str]:
        if self.subscription:
            return object_id(self.subscription)
        details = (self.parent or {}).get("subscription_details") or {}
        return object_id(details.get("subscription"))


# ============================================================================
# EVENT VARIANTS
# ============================================================================


class WebhookEvent(BaseModel):
    id: Optional[str] = None
    type: str


class CheckoutSessionCompleted(WebhookEvent):
    type: Literal["checkout.session.completed"]
    session: StripeCheckoutSession


class CheckoutSessionExpired(WebhookEvent):
    type: Literal["checkout.session.expired"]
    session: StripeCheckoutSession


class ChargeRefunded(WebhookEvent):
    type: Literal["charge.refunded"]
    charge: StripeCharge


class SubscriptionCreated(WebhookEvent):
    type: Literal["customer.subscription.created"]
    subscription: StripeSubscription


class SubscriptionUpdated(WebhookEvent):
    type: Literal["customer.subscription.updated"]
    subscription: StripeSubscription


class SubscriptionDeleted(WebhookEvent):
    type: Literal["customer.subscription.deleted"]
    subscription: StripeSubscription


class InvoicePaid(WebhookEvent):
    type: Literal["invoice.paid"]
    invoice: StripeInvoice


class InvoicePaymentFailed(WebhookEvent):
    type: Literal["invoice.payment_failed"]
    invoice: StripeInvoice


class UnrecognizedEvent(WebhookEvent):
    """Any event the store does not act on."""


StoreEvent = Union[
    CheckoutSessionCompleted,
    CheckoutSessionExpired,
    ChargeRefunded,
    SubscriptionCreated,
    SubscriptionUpdated,
    SubscriptionDeleted,
    InvoicePaid,
    InvoicePaymentFailed,
    UnrecognizedEvent,
]

# event type -> (variant, field holding data.object)
EVENT_VARIANTS: dict[str, tuple[type[WebhookEvent], str]] = {
    "checkout.session.completed": (CheckoutSessionCompleted, "session"),
    "checkout.session.expired": (CheckoutSessionExpired, "session"),
    "charge.refunded": (ChargeRefunded, "charge"),
    "customer.subscription.created": (SubscriptionCreated, "subscription"),
    "customer.subscription.updated": (SubscriptionUpdated, "subscription"),
    "customer.subscription.deleted": (SubscriptionDeleted, "subscription"),
    "invoice.paid": (InvoicePaid, "invoice"),
    "invoice.payment_failed": (InvoicePaymentFailed, "invoice"),
}


def parse_event(payload: dict[str, Any]) -> StoreEvent:
    """Map a verified event payload to its variant."""
    event_type = str(payload.get("type") or "")
    event_id = payload.get("id")
    variant = EVENT_VARIANTS.get(event_type)
    if variant is None:
        return UnrecognizedEvent(id=event_id, type=event_type)

    model, field = variant
    data = payload.get("data")
    data_object = data.get("object") if isinstance(data, dict) else None
    try:
        return model.model_validate(
            {"id": event_id, "type": event_type, field: data_object}
        )
    except PydanticValidationError as e:
        logger.warning(
            "Malformed %s event ignored: %s",
            event_type,
            e,
            extra={"extra_fields": {"event_id": event_id}},
        )
        return UnrecognizedEvent(id=event_id, type=event_type)
