"""Unit tests for order and subscription dashboard statistics."""

from datetime import datetime, timedelta, timezone

import pytest
from services.store_service.models import OrderStatus, SubscriptionStatus
from services.store_service.stats import order_stats, subscription_stats
from tests.factories import OrderFactory, SubscriptionFactory

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_order_stats_counts_revenue_only_for_paid_and_fulfilled():
    orders = [
        OrderFactory.create(status="paid", total=1000, created_at=NOW - timedelta(days=1)),
        OrderFactory.create(status="fulfilled", total=2001, created_at=NOW - timedelta(days=40)),
        OrderFactory.create(status="pending", total=5000, created_at=NOW - timedelta(days=2)),
        OrderFactory.create(status="refunded", total=700, created_at=NOW - timedelta(days=3)),
    ]

    stats = order_stats(orders, now=NOW)

    assert stats.total_orders == 4
    assert stats.recent_orders == 3
    assert stats.total_revenue == 3001
    assert stats.recent_revenue == 1000
    assert stats.average_order_value == 1501  # 1500.5 rounds half up
    assert stats.orders_by_status[OrderStatus.PENDING] == 1
    assert stats.orders_by_status[OrderStatus.CANCELLED] == 0


@pytest.mark.unit
def test_order_stats_empty():
    stats = order_stats([], now=NOW)

    assert stats.total_orders == 0
    assert stats.average_order_value == 0
    assert set(stats.orders_by_status.values()) == {0}


@pytest.mark.unit
def test_order_stats_serializes_camel_case():
    data = order_stats([OrderFactory.create()], now=NOW).model_dump(
        mode="json", by_alias=True
    )

    assert data["totalOrders"] == 1
    assert data["ordersByStatus"]["paid"] == 1


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_mrr_monthly_subscription():
    stats = subscription_stats(
        [SubscriptionFactory.create(amount=1000, interval="month")], now=NOW
    )

    assert stats.mrr == 1000
    assert stats.arr == 12000


@pytest.mark.unit
def test_mrr_yearly_subscription_is_normalized():
    stats = subscription_stats(
        [SubscriptionFactory.create(amount=12000, interval="year")], now=NOW
    )

    assert stats.mrr == 1000


@pytest.mark.unit
def test_mrr_respects_interval_count_and_ignores_non_billable():
    subs = [
        SubscriptionFactory.create(amount=3000, interval="month", interval_count=3),
        SubscriptionFactory.create(amount=500, status="trialing"),
        SubscriptionFactory.create(amount=9999, status="canceled"),
        SubscriptionFactory.create(amount=9999, status="past_due"),
    ]

    stats = subscription_stats(subs, now=NOW)

    assert stats.mrr == 1500
    assert stats.active_subscriptions == 2
    assert stats.trialing_subscriptions == 1
    assert stats.canceled_subscriptions == 1
    assert stats.past_due_subscriptions == 1


@pytest.mark.unit
def test_arr_rounds_from_unrounded_mrr():
    # 1000 / 3 per month -> 333.33 MRR, ARR from the raw figure is 4000
    stats = subscription_stats(
        [SubscriptionFactory.create(amount=1000, interval="month", interval_count=3)],
        now=NOW,
    )

    assert stats.mrr == 333
    assert stats.arr == 4000


@pytest.mark.unit
def test_recent_cancellations_window():
    subs = [
        SubscriptionFactory.create(status="canceled", canceled_at=NOW - timedelta(days=5)),
        SubscriptionFactory.create(status="canceled", canceled_at=NOW - timedelta(days=45)),
        SubscriptionFactory.create(status="canceled"),
    ]

    stats = subscription_stats(subs, now=NOW)

    assert stats.recent_cancellations == 1
    assert stats.subscriptions_by_status[SubscriptionStatus.CANCELED] == 3
