"""Admin dashboard router: orders and subscriptions reads, stats, CSV export."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Response
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.errors import NotFoundError
from services.store_service.dependencies import (
    get_order_repository,
    get_subscription_repository,
)
from services.store_service.export import export_orders_csv, export_subscriptions_csv
from services.store_service.models import (
    Order,
    OrderStatus,
    Subscription,
    SubscriptionStatus,
)
from services.store_service.repositories import OrderRepository, SubscriptionRepository
from services.store_service.schemas import OrderStats, SubscriptionStats
from services.store_service.stats import order_stats, subscription_stats

router = APIRouter(prefix="/admin", tags=["admin"])

AdminDep = Annotated[AuthUser, Depends(require_admin)]
OrdersDep = Annotated[OrderRepository, Depends(get_order_repository)]
SubscriptionsDep = Annotated[SubscriptionRepository, Depends(get_subscription_repository)]


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ============================================================================
# ORDERS
# ============================================================================


@router.get("/orders", response_model=list[Order])
async def list_orders(
    _admin: AdminDep,
    orders: OrdersDep,
    status: Optional[OrderStatus] = Query(None),
    product: Optional[str] = Query(None, description="Filter by product slug"),
):
    """List orders, newest first."""
    items = orders.list_by_product(product) if product else orders.list_all()
    if status:
        items = [o for o in items if o.status == status]
    return items


@router.get("/orders/stats", response_model=OrderStats)
async def get_order_stats(_admin: AdminDep, orders: OrdersDep):
    return order_stats(orders.list_all())


@router.get("/orders/export")
async def export_orders(_admin: AdminDep, orders: OrdersDep):
    return _csv_response(export_orders_csv(orders.list_all()), "orders.csv")


@router.get("/orders/{order_id}", response_model=Order)
async def get_order(order_id: str, _admin: AdminDep, orders: OrdersDep):
    order = orders.get(order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


# ============================================================================
# SUBSCRIPTIONS
# ============================================================================


@router.get("/subscriptions", response_model=list[Subscription])
async def list_subscriptions(
    _admin: AdminDep,
    subscriptions: SubscriptionsDep,
    status: Optional[SubscriptionStatus] = Query(None),
    email: Optional[str] = Query(None),
):
    """List subscriptions, newest first."""
    items = (
        subscriptions.list_by_email(email) if email else subscriptions.list_all()
    )
    if status:
        items = [s for s in items if s.status == status]
    return items


@router.get("/subscriptions/stats", response_model=SubscriptionStats)
async def get_subscription_stats(_admin: AdminDep, subscriptions: SubscriptionsDep):
    return subscription_stats(subscriptions.list_all())


@router.get("/subscriptions/export")
async def export_subscriptions(_admin: AdminDep, subscriptions: SubscriptionsDep):
    return _csv_response(
        export_subscriptions_csv(subscriptions.list_all()), "subscriptions.csv"
    )
