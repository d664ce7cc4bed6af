"""Unit tests for the JSON file repositories."""

import json
import re
from datetime import timedelta

import pytest
from libs.storage.repository import JsonFileRepository, is_safe_key
from services.store_service.models import Order, OrderStatus
from services.store_service.repositories import (
    OrderRepository,
    SubscriptionRepository,
    generate_order_id,
    generate_subscription_id,
)
from tests.factories import OrderFactory, SubscriptionFactory, _now


@pytest.fixture
def orders(tmp_path):
    return OrderRepository(tmp_path / "orders")


@pytest.fixture
def subscriptions(tmp_path):
    return SubscriptionRepository(tmp_path / "subscriptions")


# ---------------------------------------------------------------------------
# Ids & keys
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_generated_ids_follow_prefix_scheme():
    assert re.fullmatch(r"ORD-[0-9A-Z]+-[0-9A-Z]{6}", generate_order_id())
    assert re.fullmatch(r"SUB-[0-9A-Z]+-[0-9A-Z]{6}", generate_subscription_id())
    assert generate_order_id() != generate_order_id()


@pytest.mark.unit
@pytest.mark.parametrize("key", ["", "../etc", "a/b", "a\\b", ".hidden"])
def test_unsafe_keys(key):
    assert is_safe_key(key) is False


# ---------------------------------------------------------------------------
# JsonFileRepository
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_save_writes_camel_case_json_file(orders, tmp_path):
    order = orders.save(OrderFactory.create(stripe_session_id="cs_1"))

    data = json.loads((tmp_path / "orders" / f"{order.id}.json").read_text())
    assert data["stripeSessionId"] == "cs_1"
    assert data["customer"]["email"] == order.customer.email
    assert "notes" not in data


@pytest.mark.unit
def test_get_round_trips(orders):
    order = orders.save(OrderFactory.create())

    assert orders.get(order.id) == order
    assert orders.get("ORD-MISSING") is None
    assert orders.get("../secret") is None


@pytest.mark.unit
def test_save_rejects_unsafe_id(orders):
    with pytest.raises(ValueError):
        orders.save(OrderFactory.create(id="../escape"))


@pytest.mark.unit
def test_malformed_records_are_skipped(orders, tmp_path):
    good = orders.save(OrderFactory.create())
    (tmp_path / "orders" / "bad.json").write_text("{broken", encoding="utf-8")
    (tmp_path / "orders" / "wrong.json").write_text('{"id": "x"}', encoding="utf-8")

    assert [o.id for o in orders.list_all()] == [good.id]


@pytest.mark.unit
def test_list_on_missing_directory_is_empty(tmp_path):
    repo = JsonFileRepository(tmp_path / "nowhere", model=Order)

    assert repo.list_all() == []


# ---------------------------------------------------------------------------
# OrderRepository
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_orders_listed_newest_first(orders):
    old = orders.save(OrderFactory.create(created_at=_now() - timedelta(days=3)))
    new = orders.save(OrderFactory.create(created_at=_now()))

    assert [o.id for o in orders.list_all()] == [new.id, old.id]


@pytest.mark.unit
def test_naive_timestamps_load_as_utc(orders, tmp_path):
    aware = orders.save(OrderFactory.create(created_at=_now()))
    naive = orders.save(OrderFactory.create(stripe_session_id="cs_naive"))
    path = tmp_path / "orders" / f"{naive.id}.json"
    data = json.loads(path.read_text())
    data["createdAt"] = "2020-10-01T00:00:00"
    path.write_text(json.dumps(data), encoding="utf-8")

    listed = orders.list_all()

    assert [o.id for o in listed] == [aware.id, naive.id]
    assert listed[1].created_at.tzinfo is not None
    assert orders.get_by_session_id("cs_naive").id == naive.id


@pytest.mark.unit
def test_order_lookups(orders):
    order = orders.save(OrderFactory.create(stripe_session_id="cs_find"))
    orders.save(
        OrderFactory.create(
            items=[{"product_slug": "mug", "product_name": "Mug", "quantity": 1}]
        )
    )

    assert orders.get_by_session_id("cs_find").id == order.id
    assert orders.get_by_session_id("cs_none") is None
    assert [o.id for o in orders.list_by_product("widget")] == [order.id]


@pytest.mark.unit
def test_order_update_bumps_updated_at(orders):
    order = orders.save(OrderFactory.create(updated_at=_now() - timedelta(days=1)))

    updated = orders.update(order.id, status=OrderStatus.FULFILLED, notes="Shipped")

    assert updated.status == OrderStatus.FULFILLED
    assert updated.notes == "Shipped"
    assert updated.updated_at > order.updated_at
    assert orders.get(order.id).status == OrderStatus.FULFILLED
    assert orders.update("ORD-MISSING", notes="x") is None


# ---------------------------------------------------------------------------
# SubscriptionRepository
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_subscription_lookups(subscriptions):
    sub = subscriptions.save(
        SubscriptionFactory.create(
            stripe_subscription_id="sub_1",
            stripe_customer_id="cus_1",
            customer={"email": "Person@Example.com"},
            product_slug="coffee-club",
        )
    )
    subscriptions.save(SubscriptionFactory.create(product_slug="tea-club"))

    assert subscriptions.get_by_stripe_id("sub_1").id == sub.id
    assert [s.id for s in subscriptions.list_by_email("person@example.COM")] == [sub.id]
    assert [s.id for s in subscriptions.list_by_customer_id("cus_1")] == [sub.id]
    assert [s.id for s in subscriptions.list_by_product("coffee-club")] == [sub.id]
