"""Store catalog models: products as stored under content/products."""

from typing import Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel
from services.store_service.models.base import ContentModel
from services.store_service.models.enums import (
    BillingInterval,
    ProductStatus,
    ProductType,
)


class ProductImage(ContentModel):
    src: str
    alt: Optional[str] = None


class ProductPricing(ContentModel):
    price: float = Field(..., ge=0)  # major units
    compare_at_price: Optional[float] = Field(None, ge=0)
    taxable: Optional[bool] = None


class ProductInventory(ContentModel):
    track_inventory: bool = False
    quantity: Optional[int] = None
    sku: Optional[str] = None
    allow_backorder: bool = False


class SubscriptionDetails(ContentModel):
    interval: BillingInterval
    interval_count: int = Field(1, ge=1)  # e.g. 2 for "every 2 months"
    trial_days: Optional[int] = Field(None, ge=0)


class ProductVariant(ContentModel):
    name: str
    sku: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    image: Optional[str] = None


class Product(ContentModel):
    """A catalog product.

    Subscription vs one-time purchase is decided solely by the presence of
    ``subscription``. Content-only sections (seo, physical/digital/service
    details, rich descriptions) pass through untouched.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    name: str
    slug: str
    description: Optional[str] = None
    product_type: ProductType
    pricing: ProductPricing
    images: list[ProductImage] = []
    category: Optional[str] = None
    tags: Optional[str] = None  # comma-separated
    inventory: Optional[ProductInventory] = None
    variants: list[ProductVariant] = []
    status: ProductStatus = ProductStatus.ACTIVE
    featured: bool = False
    unlisted: bool = False  # hidden from listings, reachable by access code
    subscription: Optional[SubscriptionDetails] = None

    # Provider catalog links
    stripe_product_id: Optional[str] = None  # live mode, prod_...
    stripe_test_product_id: Optional[str] = None

    @property
    def is_subscription(self) -> bool:
        return self.subscription is not None

    @property
    def is_physical(self) -> bool:
        return self.product_type == ProductType.PHYSICAL

    @property
    def is_listed(self) -> bool:
        return self.status == ProductStatus.ACTIVE and not self.unlisted

    @property
    def tag_list(self) -> list[str]:
        if not self.tags:
            return []
        return [t.strip() for t in self.tags.split(",") if t.strip()]

    @property
    def is_in_stock(self) -> bool:
        if not self.inventory or not self.inventory.track_inventory:
            return True
        if self.inventory.allow_backorder:
            return True
        return (self.inventory.quantity or 0) > 0

    @property
    def available_quantity(self) -> Optional[int]:
        """None means unlimited (inventory not tracked)."""
        if not self.inventory or not self.inventory.track_inventory:
            return None
        return self.inventory.quantity or 0

    @property
    def sku(self) -> str:
        return (self.inventory.sku if self.inventory else None) or ""

    def external_product_id(self, test_mode: bool) -> Optional[str]:
        """Provider product id for the current environment, if synced."""
        return self.stripe_test_product_id if test_mode else self.stripe_product_id
