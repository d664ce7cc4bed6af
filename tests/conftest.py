"""Shared fixtures for the store service test suite.

Every test runs against its own temporary content directory and a fake
Stripe client; nothing touches the network.
"""

import json
from pathlib import Path
from typing import Any, AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt

from libs.common.config import Settings, get_settings
from libs.common.errors import ProviderError
from libs.common.rate_limit import limiter
from services.store_service.models import Product
from services.store_service.stripe_client import CreatedCheckoutSession
from tests.factories import WEBHOOK_SECRET, sign_payload

TEST_SECRET_KEY = "sk_test_storefront"
TEST_WEBHOOK_SECRET = WEBHOOK_SECRET
TEST_ADMIN_SECRET = "test-admin-jwt-secret"


# ---------------------------------------------------------------------------
# Fake Stripe
# ---------------------------------------------------------------------------


class FakeStripeClient:
    """In-memory stand-in for StripeClient that records what it was asked."""

    test_mode = True

    def __init__(self):
        self.created_sessions: list[dict[str, Any]] = []
        self.sessions: dict[str, dict[str, Any]] = {}
        self.line_items: dict[str, list[dict[str, Any]]] = {}
        self.products: dict[str, dict[str, Any]] = {}
        self.customers: dict[str, dict[str, Any]] = {}
        self.portal_sessions: list[dict[str, str]] = []
        self.fail_checkout: Optional[str] = None
        self.fail_products = False

    async def create_checkout_session(self, params):
        if self.fail_checkout:
            raise ProviderError(self.fail_checkout, code="invalid_request_error")
        self.created_sessions.append(params)
        session_id = f"cs_test_{len(self.created_sessions)}"
        return CreatedCheckoutSession(
            id=session_id, url=f"https://checkout.stripe.com/c/pay/{session_id}"
        )

    async def retrieve_checkout_session(self, session_id):
        if session_id not in self.sessions:
            raise ProviderError(f"No such checkout.session: '{session_id}'")
        return self.sessions[session_id]

    async def list_line_items(self, session_id):
        return self.line_items.get(session_id, [])

    async def retrieve_product(self, product_id):
        if self.fail_products or product_id not in self.products:
            raise ProviderError(f"No such product: '{product_id}'")
        return self.products[product_id]

    async def retrieve_customer(self, customer_id):
        if customer_id not in self.customers:
            raise ProviderError(f"No such customer: '{customer_id}'")
        return self.customers[customer_id]

    async def find_customer_by_email(self, email):
        for customer in self.customers.values():
            if customer.get("email") == email:
                return customer
        return None

    async def create_billing_portal_session(self, customer_id, return_url):
        self.portal_sessions.append({"customer": customer_id, "return_url": return_url})
        return f"https://billing.stripe.com/p/session/{customer_id}"


# ---------------------------------------------------------------------------
# Settings & content
# ---------------------------------------------------------------------------


@pytest.fixture
def content_dir(tmp_path) -> Path:
    path = tmp_path / "content"
    (path / "products").mkdir(parents=True)
    return path


@pytest.fixture(autouse=True)
def store_settings(monkeypatch, content_dir) -> Settings:
    """Point settings at the temporary content dir with test-mode keys."""
    monkeypatch.setenv("ENVIRONMENT", "local")
    monkeypatch.setenv("CONTENT_DIR", str(content_dir))
    monkeypatch.setenv("SITE_URL", "http://shop.test")
    monkeypatch.setenv("STRIPE_SECRET_KEY", TEST_SECRET_KEY)
    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", TEST_WEBHOOK_SECRET)
    monkeypatch.setenv("ADMIN_JWT_SECRET", TEST_ADMIN_SECRET)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def write_product(content_dir):
    """Persist a product the way the CMS does: content/products/<slug>.json."""

    def _write(product: Product) -> Product:
        path = content_dir / "products" / f"{product.slug}.json"
        path.write_text(
            json.dumps(
                product.model_dump(mode="json", by_alias=True, exclude_none=True),
                indent=2,
            ),
            encoding="utf-8",
        )
        return product

    return _write


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_stripe() -> FakeStripeClient:
    return FakeStripeClient()


@pytest_asyncio.fixture
async def client(fake_stripe) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient bound to the store app with Stripe replaced by the fake."""
    from services.store_service.app.main import app
    from services.store_service.dependencies import get_optional_stripe_client

    app.dependency_overrides[get_optional_stripe_client] = lambda: fake_stripe

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    token = jwt.encode(
        {"sub": "admin-1", "email": "admin@storefront.io", "role": "admin"},
        TEST_ADMIN_SECRET,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def editor_headers() -> dict[str, str]:
    token = jwt.encode(
        {"sub": "editor-1", "role": "editor"}, TEST_ADMIN_SECRET, algorithm="HS256"
    )
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------


@pytest.fixture
def post_webhook(client):
    """POST a signed event to the webhook endpoint."""

    async def _post(event: dict[str, Any], secret: str = TEST_WEBHOOK_SECRET):
        payload = json.dumps(event)
        return await client.post(
            "/api/webhooks/stripe",
            content=payload,
            headers={
                "stripe-signature": sign_payload(payload, secret),
                "content-type": "application/json",
            },
        )

    return _post
