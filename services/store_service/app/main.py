"""FastAPI application for the Store Service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.store_service.routers import (
    admin_router,
    catalog_router,
    checkout_router,
    services_router,
    subscriptions_router,
    webhooks_router,
)
from slowapi.errors import RateLimitExceeded


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="Storefront Store Service",
        version="0.1.0",
        description="Storefront commerce: catalog, checkout, Stripe webhooks, orders.",
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.SITE_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    # Storefront routes
    app.include_router(catalog_router, prefix="/api")
    app.include_router(checkout_router, prefix="/api")
    app.include_router(services_router, prefix="/api")
    app.include_router(subscriptions_router, prefix="/api")
    app.include_router(webhooks_router, prefix="/api")

    # Dashboard routes
    app.include_router(admin_router, prefix="/api")

    return app


app = create_app()
