"""Access-code lookup for unlisted services."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from libs.common.errors import ValidationError
from services.store_service.catalog import ProductCatalog
from services.store_service.dependencies import get_catalog
from services.store_service.schemas import AccessCodeResponse

router = APIRouter(prefix="/services", tags=["services"])


@router.get("/access", response_model=AccessCodeResponse)
async def get_service_by_access_code(
    catalog: Annotated[ProductCatalog, Depends(get_catalog)],
    code: Optional[str] = Query(None),
):
    """Return an unlisted, active service given its access code (the slug)."""
    if not code:
        raise ValidationError("Access code is required")
    product = await catalog.get_product_by_access_code(code)
    return AccessCodeResponse(product=product)
