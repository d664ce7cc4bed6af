"""CSV exports for the orders and subscriptions dashboards."""

import csv
import io
from typing import Iterable

from libs.common.currency import format_minor_units
from services.store_service.models import Order, Subscription

ORDER_COLUMNS = [
    "Order ID",
    "Date",
    "Status",
    "Customer Email",
    "Customer Name",
    "Product",
    "Product Slug",
    "Quantity",
    "Unit Price",
    "Line Total",
    "Order Total",
    "Currency",
    "Shipping Name",
    "Shipping Address",
    "Shipping City",
    "Shipping State",
    "Shipping Postal Code",
    "Shipping Country",
]

SUBSCRIPTION_COLUMNS = [
    "Subscription ID",
    "Status",
    "Customer Email",
    "Customer Name",
    "Product",
    "Product Slug",
    "Amount",
    "Currency",
    "Interval",
    "Interval Count",
    "Current Period Start",
    "Current Period End",
    "Trial End",
    "Canceled At",
    "Created At",
]


def _iso(value) -> str:
    return value.isoformat() if value else ""


def _render(header: list[str], rows: Iterable[list[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def export_orders_csv(orders: Iterable[Order]) -> str:
    """One row per order item."""
    rows = []
    for order in orders:
        shipping = order.shipping
        address = shipping.address if shipping else None
        for item in order.items:
            rows.append(
                [
                    order.id,
                    _iso(order.created_at),
                    order.status.value,
                    order.customer.email,
                    order.customer.name or "",
                    item.product_name,
                    item.product_slug,
                    str(item.quantity),
                    format_minor_units(item.unit_price),
                    format_minor_units(item.total_price),
                    format_minor_units(order.total),
                    order.currency,
                    (shipping.name if shipping else None) or "",
                    (address.line1 if address else None) or "",
                    (address.city if address else None) or "",
                    (address.state if address else None) or "",
                    (address.postal_code if address else None) or "",
                    (address.country if address else None) or "",
                ]
            )
    return _render(ORDER_COLUMNS, rows)


def export_subscriptions_csv(subscriptions: Iterable[Subscription]) -> str:
    rows = [
        [
            sub.id,
            sub.status.value,
            sub.customer.email,
            sub.customer.name or "",
            sub.product_name,
            sub.product_slug,
            format_minor_units(sub.amount),
            sub.currency,
            sub.interval.value,
            str(sub.interval_count),
            _iso(sub.current_period_start),
            _iso(sub.current_period_end),
            _iso(sub.trial_end),
            _iso(sub.canceled_at),
            _iso(sub.created_at),
        ]
        for sub in subscriptions
    ]
    return _render(SUBSCRIPTION_COLUMNS, rows)
