"""Integration tests for the admin orders and subscriptions dashboard."""

from datetime import timedelta

import pytest
from services.store_service.repositories import OrderRepository, SubscriptionRepository
from tests.factories import OrderFactory, SubscriptionFactory, _now


@pytest.fixture
def orders(content_dir):
    return OrderRepository(content_dir / "orders")


@pytest.fixture
def subscriptions(content_dir):
    return SubscriptionRepository(content_dir / "subscriptions")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_requires_token(client):
    response = await client.get("/api/admin/orders")

    assert response.status_code == 401
    assert response.json() == {"error": "Could not validate credentials"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_rejects_non_admin_role(client, editor_headers):
    response = await client.get("/api/admin/orders", headers=editor_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_accepts_cookie(client, admin_headers):
    token = admin_headers["Authorization"].split(" ", 1)[1]
    client.cookies.set("admin_token", token)

    response = await client.get("/api/admin/orders")

    assert response.status_code == 200


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_and_get_orders(client, admin_headers, orders):
    old = orders.save(OrderFactory.create(created_at=_now() - timedelta(days=2)))
    new = orders.save(OrderFactory.create(status="pending"))

    listed = await client.get("/api/admin/orders", headers=admin_headers)
    pending = await client.get(
        "/api/admin/orders", params={"status": "pending"}, headers=admin_headers
    )
    detail = await client.get(f"/api/admin/orders/{old.id}", headers=admin_headers)
    missing = await client.get("/api/admin/orders/ORD-NOPE", headers=admin_headers)

    assert [o["id"] for o in listed.json()] == [new.id, old.id]
    assert [o["id"] for o in pending.json()] == [new.id]
    assert detail.json()["stripeSessionId"] == old.stripe_session_id
    assert missing.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_order_stats_and_export(client, admin_headers, orders):
    orders.save(OrderFactory.create(status="paid", total=1000))
    orders.save(OrderFactory.create(status="fulfilled", total=3000))
    orders.save(OrderFactory.create(status="cancelled", total=9999))

    stats = await client.get("/api/admin/orders/stats", headers=admin_headers)
    export = await client.get("/api/admin/orders/export", headers=admin_headers)

    data = stats.json()
    assert data["totalOrders"] == 3
    assert data["totalRevenue"] == 4000
    assert data["averageOrderValue"] == 2000
    assert data["ordersByStatus"]["cancelled"] == 1

    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert "orders.csv" in export.headers["content-disposition"]
    assert export.text.splitlines()[0].startswith("Order ID,Date,Status")
    assert len(export.text.splitlines()) == 4


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_subscription_dashboard(client, admin_headers, subscriptions):
    subscriptions.save(SubscriptionFactory.create(amount=1000, interval="month"))
    subscriptions.save(SubscriptionFactory.create(amount=12000, interval="year"))
    subscriptions.save(
        SubscriptionFactory.create(status="canceled", customer={"email": "gone@test.com"})
    )

    listed = await client.get("/api/admin/subscriptions", headers=admin_headers)
    by_email = await client.get(
        "/api/admin/subscriptions", params={"email": "GONE@test.com"}, headers=admin_headers
    )
    stats = await client.get("/api/admin/subscriptions/stats", headers=admin_headers)
    export = await client.get("/api/admin/subscriptions/export", headers=admin_headers)

    assert len(listed.json()) == 3
    assert [s["status"] for s in by_email.json()] == ["canceled"]
    assert stats.json()["mrr"] == 2000
    assert stats.json()["arr"] == 24000
    assert stats.json()["activeSubscriptions"] == 2
    assert export.text.splitlines()[0].startswith("Subscription ID,Status")
