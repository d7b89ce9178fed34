"""Product Routes — catalog CRUD and listing over ProductCatalogService.

Invariants:
    - Bodies are passed through as raw objects: the Validation Engine reports
      every violation at once instead of Pydantic stopping at type errors
    - Listing query parameters are forwarded as-is; the service sanitizes them
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status

from airsoft_shop.api.dependencies import get_catalog
from airsoft_shop.services.catalog_service import ProductCatalogService

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("")
async def list_products(
    category: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    min_price: str | None = None,
    max_price: str | None = None,
    query: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    sort: str | None = None,
    order: str | None = None,
    catalog: ProductCatalogService = Depends(get_catalog),
):
    """Filtered, sorted, paginated product listing."""
    return await catalog.list(
        {
            "category": category,
            "status": status_filter,
            "min_price": min_price,
            "max_price": max_price,
            "query": query,
        },
        {"page": page, "limit": limit, "sort": sort, "order": order},
    )


@router.get("/{product_id}")
async def get_product(
    product_id: str, catalog: ProductCatalogService = Depends(get_catalog),
):
    return await catalog.get_by_id(product_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    body: Any = Body(...), catalog: ProductCatalogService = Depends(get_catalog),
):
    return await catalog.create(body)


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    body: Any = Body(...),
    catalog: ProductCatalogService = Depends(get_catalog),
):
    return await catalog.update(product_id, body)


@router.delete("/{product_id}")
async def delete_product(
    product_id: str, catalog: ProductCatalogService = Depends(get_catalog),
):
    return await catalog.delete(product_id)
