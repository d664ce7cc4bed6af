"""Store catalog router: product listings, detail, categories and tags."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from libs.common.errors import NotFoundError
from services.store_service.catalog import ProductCatalog, sort_products
from services.store_service.dependencies import get_catalog
from services.store_service.models import Product, ProductType, SortOption
from services.store_service.schemas import ProductFilters

router = APIRouter(prefix="/products", tags=["store"])

CatalogDep = Annotated[ProductCatalog, Depends(get_catalog)]


# ============================================================================
# CATALOG - PRODUCTS
# ============================================================================


@router.get("", response_model=list[Product])
async def list_products(
    catalog: CatalogDep,
    category: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    in_stock: bool = Query(False),
    product_type: Optional[ProductType] = Query(None),
    q: Optional[str] = Query(None, description="Search name, description, tags"),
    sort: SortOption = Query(SortOption.NEWEST),
):
    """List active, listed products with optional filtering and sorting."""
    filters = ProductFilters(
        category=category,
        tag=tag,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        product_type=product_type,
        q=q,
    )
    products = await catalog.get_filtered_products(filters)
    return sort_products(products, sort)


@router.get("/categories", response_model=list[str])
async def list_categories(catalog: CatalogDep):
    return await catalog.get_product_categories()


@router.get("/tags", response_model=list[str])
async def list_tags(catalog: CatalogDep):
    return await catalog.get_product_tags()


@router.get("/{slug}", response_model=Product)
async def get_product(slug: str, catalog: CatalogDep):
    """Get a listed product by slug, with live name/images/price when synced."""
    product = await catalog.get_product_with_overlay(slug)
    if product is None or not product.is_listed:
        raise NotFoundError("Product not found")
    return product
