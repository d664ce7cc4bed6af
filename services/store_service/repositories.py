"""Order and subscription stores on top of the JSON file repository."""

from typing import Any, Optional

from libs.common.datetime_utils import utc_now
from libs.storage.repository import JsonFileRepository, ModelT
from services.store_service.models import Order, Subscription


def generate_order_id() -> str:
    return Order.generate_id()


def generate_subscription_id() -> str:
    return Subscription.generate_id()


class _TimestampedRepository(JsonFileRepository[ModelT]):
    def list_all(self) -> list[ModelT]:
        """All records, newest first."""
        return sorted(super().list_all(), key=lambda r: r.created_at, reverse=True)

    def update(self, record_id: str, **changes: Any) -> Optional[ModelT]:
        """
        Apply field changes to a stored record and bump ``updated_at``.

        Returns:
            The saved record, or None when no record has this id
        """
        record = self.get(record_id)
        if record is None:
            return None
        changes["updated_at"] = utc_now()
        updated = self.model.model_validate({**record.model_dump(), **changes})
        return self.save(updated)


class OrderRepository(_TimestampedRepository[Order]):
    model = Order

    def get_by_session_id(self, session_id: str) -> Optional[Order]:
        for order in self.list_all():
            if order.stripe_session_id == session_id:
                return order
        return None

    def list_by_product(self, product_slug: str) -> list[Order]:
        return [
            order
            for order in self.list_all()
            if any(item.product_slug == product_slug for item in order.items)
        ]


class SubscriptionRepository(_TimestampedRepository[Subscription]):
    model = Subscription

    def get_by_stripe_id(self, stripe_subscription_id: str) -> Optional[Subscription]:
        for subscription in self.list_all():
            if subscription.stripe_subscription_id == stripe_subscription_id:
                return subscription
        return None

    def list_by_email(self, email: str) -> list[Subscription]:
        wanted = email.lower()
        return [s for s in self.list_all() if s.customer.email.lower() == wanted]

    def list_by_customer_id(self, stripe_customer_id: str) -> list[Subscription]:
        return [s for s in self.list_all() if s.stripe_customer_id == stripe_customer_id]

    def list_by_product(self, product_slug: str) -> list[Subscription]:
        return [s for s in self.list_all() if s.product_slug == product_slug]
