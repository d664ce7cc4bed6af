"""Store service routers package."""

from services.store_service.routers.admin import router as admin_router
from services.store_service.routers.catalog import router as catalog_router
from services.store_service.routers.checkout import router as checkout_router
from services.store_service.routers.services import router as services_router
from services.store_service.routers.subscriptions import router as subscriptions_router
from services.store_service.routers.webhooks import router as webhooks_router

__all__ = [
    "admin_router",
    "catalog_router",
    "checkout_router",
    "services_router",
    "subscriptions_router",
    "webhooks_router",
]
