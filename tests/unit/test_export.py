"""Unit tests for the dashboard CSV exports."""

import csv
import io

import pytest
from services.store_service.export import (
    ORDER_COLUMNS,
    SUBSCRIPTION_COLUMNS,
    export_orders_csv,
    export_subscriptions_csv,
)
from tests.factories import OrderFactory, SubscriptionFactory


def _rows(content: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(content)))


@pytest.mark.unit
def test_orders_export_one_row_per_item_with_quoting():
    order = OrderFactory.create(
        customer={"email": "a@test.com", "name": 'Smith, "Jo"'},
        items=[
            {"product_slug": "mug", "product_name": "Mug", "quantity": 2, "unit_price": 500, "total_price": 1000},
            {"product_slug": "hat", "product_name": "Hat", "quantity": 1, "unit_price": 1999, "total_price": 1999},
        ],
        total=2999,
        shipping={"name": "Jo", "address": {"line1": "1 Main St", "city": "Town", "country": "US"}},
    )

    content = export_orders_csv([order])
    rows = _rows(content)

    assert rows[0] == ORDER_COLUMNS
    assert len(rows) == 3
    assert '"Smith, ""Jo"""' in content
    assert rows[1][4] == 'Smith, "Jo"'
    assert rows[1][7:12] == ["2", "5.00", "10.00", "29.99", "USD"]
    assert rows[2][5] == "Hat"
    assert rows[1][13] == "1 Main St"
    assert rows[1][15] == ""


@pytest.mark.unit
def test_subscriptions_export():
    sub = SubscriptionFactory.create(amount=1500, interval="year", interval_count=2)

    rows = _rows(export_subscriptions_csv([sub]))

    assert rows[0] == SUBSCRIPTION_COLUMNS
    assert rows[1][0] == sub.id
    assert rows[1][6:10] == ["15.00", "USD", "year", "2"]
    assert rows[1][12] == ""


@pytest.mark.unit
def test_empty_exports_have_header_only():
    assert _rows(export_orders_csv([])) == [ORDER_COLUMNS]
    assert _rows(export_subscriptions_csv([])) == [SUBSCRIPTION_COLUMNS]
