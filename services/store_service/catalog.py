"""Product catalog reader over content/products/<slug>.json.

Local JSON files are the source of truth. Products synced to Stripe can
have their name, images and price overlaid from the live provider catalog;
the local description always wins, and any provider failure falls back to
the local record.
"""

from pathlib import Path
from typing import Any, Mapping, Optional

from libs.common.errors import NotFoundError
from libs.common.logging import get_logger
from libs.storage.repository import is_safe_key
from pydantic import ValidationError as PydanticValidationError
from services.store_service.models import (
    Product,
    ProductImage,
    ProductStatus,
    SortOption,
)
from services.store_service.schemas import ProductFilters
from services.store_service.stripe_client import StripeClient

logger = get_logger(__name__)


class ProductCatalog:
    """Reads products from disk, optionally enriched from Stripe."""

    def __init__(
        self,
        products_dir: Path | str,
        stripe_client: Optional[StripeClient] = None,
        test_mode: bool = False,
    ):
        self.products_dir = Path(products_dir)
        self.stripe_client = stripe_client
        self.test_mode = test_mode

    # ------------------------------------------------------------------
    # Single product lookups
    # ------------------------------------------------------------------

    def _read(self, path: Path) -> Optional[Product]:
        try:
            return Product.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, PydanticValidationError) as e:
            logger.error("Error reading product %s: %s", path.name, e)
            return None

    async def get_product(self, slug: str) -> Optional[Product]:
        """Local product record by slug, or None."""
        if not is_safe_key(slug):
            return None
        path = self.products_dir / f"{slug}.json"
        if not path.is_file():
            return None
        return self._read(path)

    async def get_product_with_overlay(self, slug: str) -> Optional[Product]:
        """Product by slug with live Stripe name/images/price when synced."""
        product = await self.get_product(slug)
        if product is None:
            return None
        return await self.apply_overlay(product)

    async def apply_overlay(self, product: Product) -> Product:
        external_id = product.external_product_id(self.test_mode)
        if not external_id or self.stripe_client is None:
            return product
        try:
            remote = await self.stripe_client.retrieve_product(external_id)
            return overlay_product(product, remote)
        except Exception as e:
            # Overlay failures never reach the caller
            logger.warning(
                "Catalog overlay failed for %s, using local record: %s",
                product.slug,
                e,
            )
            return product

    async def get_product_by_access_code(self, code: str) -> Product:
        """
        Resolve an unlisted service by its access code (the product slug).

        Raises:
            NotFoundError: Unknown code, a listed product, or an inactive one
        """
        product = await self.get_product(code)
        if product is None:
            raise NotFoundError("Service not found")
        if not product.unlisted:
            raise NotFoundError("Invalid access code")
        if product.status != ProductStatus.ACTIVE:
            raise NotFoundError("This service is not available")
        return product

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def get_all_products(self) -> list[Product]:
        if not self.products_dir.is_dir():
            return []
        products = []
        for path in sorted(self.products_dir.glob("*.json")):
            product = self._read(path)
            if product is not None:
                products.append(product)
        return products

    async def get_active_products(self) -> list[Product]:
        """Active, listed products; unlisted ones never appear here."""
        return [p for p in await self.get_all_products() if p.is_listed]

    async def get_featured_products(self) -> list[Product]:
        return [p for p in await self.get_active_products() if p.featured]

    async def get_products_by_category(self, category: str) -> list[Product]:
        wanted = category.lower()
        return [
            p
            for p in await self.get_active_products()
            if p.category and p.category.lower() == wanted
        ]

    async def get_products_by_tag(self, tag: str) -> list[Product]:
        wanted = tag.lower()
        return [
            p
            for p in await self.get_active_products()
            if wanted in (t.lower() for t in p.tag_list)
        ]

    async def search_products(self, query: str) -> list[Product]:
        return [
            p for p in await self.get_active_products() if _matches_query(p, query)
        ]

    async def get_filtered_products(self, filters: ProductFilters) -> list[Product]:
        products = await self.get_active_products()

        if filters.category:
            category = filters.category.lower()
            products = [
                p for p in products if p.category and p.category.lower() == category
            ]
        if filters.tag:
            tag = filters.tag.lower()
            products = [p for p in products if tag in (t.lower() for t in p.tag_list)]
        if filters.min_price is not None:
            products = [p for p in products if p.pricing.price >= filters.min_price]
        if filters.max_price is not None:
            products = [p for p in products if p.pricing.price <= filters.max_price]
        if filters.in_stock:
            products = [p for p in products if p.is_in_stock]
        if filters.product_type:
            products = [p for p in products if p.product_type == filters.product_type]
        if filters.q:
            products = [p for p in products if _matches_query(p, filters.q)]

        return products

    async def get_product_categories(self) -> list[str]:
        return sorted({p.category for p in await self.get_active_products() if p.category})

    async def get_product_tags(self) -> list[str]:
        tags: set[str] = set()
        for p in await self.get_active_products():
            tags.update(p.tag_list)
        return sorted(tags)


def _matches_query(product: Product, query: str) -> bool:
    needle = query.lower()
    haystacks = (product.name, product.description, product.category, product.tags)
    return any(h and needle in h.lower() for h in haystacks)


def overlay_product(product: Product, remote: Mapping[str, Any]) -> Product:
    """Copy live name, images and unit price onto a local product.

    The local description is kept regardless of what Stripe holds.
    """
    updates: dict[str, Any] = {}

    if remote.get("name"):
        updates["name"] = remote["name"]

    images = remote.get("images") or []
    if images:
        updates["images"] = [ProductImage(src=url, alt=remote.get("name")) for url in images]

    default_price = remote.get("default_price")
    if isinstance(default_price, Mapping) and default_price.get("unit_amount") is not None:
        pricing = product.pricing.model_copy(
            update={"price": default_price["unit_amount"] / 100}
        )
        updates["pricing"] = pricing

    return product.model_copy(update=updates)


def sort_products(products: list[Product], sort: SortOption) -> list[Product]:
    """Sort a product list; ``newest`` keeps the catalog order."""
    if sort == SortOption.NAME_ASC:
        return sorted(products, key=lambda p: p.name.lower())
    if sort == SortOption.NAME_DESC:
        return sorted(products, key=lambda p: p.name.lower(), reverse=True)
    if sort == SortOption.PRICE_ASC:
        return sorted(products, key=lambda p: p.pricing.price)
    if sort == SortOption.PRICE_DESC:
        return sorted(products, key=lambda p: p.pricing.price, reverse=True)
    return list(products)
