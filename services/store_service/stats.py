"""Dashboard statistics, recomputed from the full record set on each call."""

from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, Optional

from libs.common.currency import round_minor
from libs.common.datetime_utils import utc_now
from services.store_service.models import (
    BILLABLE_SUBSCRIPTION_STATUSES,
    REVENUE_ORDER_STATUSES,
    Order,
    OrderStatus,
    Subscription,
    SubscriptionStatus,
)
from services.store_service.schemas import OrderStats, SubscriptionStats

RECENT_WINDOW = timedelta(days=30)


def order_stats(orders: Iterable[Order], now: Optional[datetime] = None) -> OrderStats:
    """Counts and revenue (minor units); revenue only counts paid/fulfilled orders."""
    orders = list(orders)
    cutoff = (now or utc_now()) - RECENT_WINDOW

    revenue_orders = [o for o in orders if o.status in REVENUE_ORDER_STATUSES]
    total_revenue = sum(o.total for o in revenue_orders)
    recent = [o for o in orders if o.created_at >= cutoff]
    recent_revenue = sum(o.total for o in recent if o.status in REVENUE_ORDER_STATUSES)

    by_status = Counter(o.status for o in orders)
    return OrderStats(
        total_orders=len(orders),
        recent_orders=len(recent),
        total_revenue=total_revenue,
        recent_revenue=recent_revenue,
        average_order_value=(
            round_minor(total_revenue / len(revenue_orders)) if revenue_orders else 0
        ),
        orders_by_status={s: by_status.get(s, 0) for s in OrderStatus},
    )


def monthly_recurring_revenue(subscriptions: Iterable[Subscription]) -> float:
    """Unrounded MRR over active and trialing subscriptions."""
    return sum(
        s.monthly_amount
        for s in subscriptions
        if s.status in BILLABLE_SUBSCRIPTION_STATUSES
    )


def subscription_stats(
    subscriptions: Iterable[Subscription], now: Optional[datetime] = None
) -> SubscriptionStats:
    subscriptions = list(subscriptions)
    cutoff = (now or utc_now()) - RECENT_WINDOW
    by_status = Counter(s.status for s in subscriptions)

    recent_cancellations = [
        s
        for s in subscriptions
        if s.status == SubscriptionStatus.CANCELED
        and s.canceled_at is not None
        and s.canceled_at >= cutoff
    ]
    mrr = monthly_recurring_revenue(subscriptions)

    return SubscriptionStats(
        total_subscriptions=len(subscriptions),
        active_subscriptions=sum(
            by_status.get(s, 0) for s in BILLABLE_SUBSCRIPTION_STATUSES
        ),
        trialing_subscriptions=by_status.get(SubscriptionStatus.TRIALING, 0),
        canceled_subscriptions=by_status.get(SubscriptionStatus.CANCELED, 0),
        past_due_subscriptions=by_status.get(SubscriptionStatus.PAST_DUE, 0),
        recent_cancellations=len(recent_cancellations),
        mrr=round_minor(mrr),
        arr=round_minor(mrr * 12),
        subscriptions_by_status={s: by_status.get(s, 0) for s in SubscriptionStatus},
    )
