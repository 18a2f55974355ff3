# routers/products.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.cache import cache_delete_prefix, cache_get, cache_set
from core.config import settings
from core.errors import handle_supabase_error
from core.permission_helpers import requires_permission
from core.supabase_client import get_supabase_client
from core.utils import sanitize, summarize_products
from models.product import ProductCreate, ProductRead, ProductSummary, ProductUpdate


router = APIRouter(
    prefix="/products",
    tags=["Products"]
)

TABLE = "pharmaceutical_products"
CACHE_PREFIX = "products:"


def _client():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


def _fetch_products(limit: int, facility: Optional[str], category: Optional[str]):
    client = _client()

    try:
        query = client.table(TABLE).select("*").limit(limit)
        if facility:
            query = query.eq("facility", facility)
        if category:
            query = query.eq("product_category", category)
        res = query.execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch products")

    return res.data or []


# ============================================================
# LIST PRODUCTS
# ============================================================
@router.get(
    "",
    summary="List Products",
    dependencies=[Depends(requires_permission("view_products"))],
)
def list_products(
    limit: int = Query(100, ge=1, le=5000),
    facility: Optional[str] = None,
    category: Optional[str] = None,
):
    cache_key = f"{CACHE_PREFIX}list:{limit}:{facility}:{category}"

    cached_result = cache_get(cache_key)
    if cached_result is not None:
        return cached_result

    result = {"success": True, "data": _fetch_products(limit, facility, category)}
    cache_set(cache_key, result, ttl_seconds=settings.CACHE_TTL_SECONDS)
    return result


# ============================================================
# SUMMARY (sums / averages over fetched rows)
# ============================================================
@router.get(
    "/summary",
    response_model=ProductSummary,
    summary="Product totals by category",
    dependencies=[Depends(requires_permission("view_analytics"))],
)
def product_summary(
    facility: Optional[str] = None,
    limit: int = Query(5000, ge=1, le=5000),
):
    return summarize_products(_fetch_products(limit, facility, None))


# ============================================================
# CREATE / UPDATE / DELETE
# ============================================================
@router.post(
    "",
    response_model=ProductRead,
    status_code=201,
    summary="Create Product",
    dependencies=[Depends(requires_permission("create_products"))],
)
def create_product(payload: ProductCreate):
    client = _client()

    try:
        res = client.table(TABLE).insert(sanitize(payload.model_dump())).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create product")

    if not res.data:
        raise HTTPException(500, "Insert returned no data")

    cache_delete_prefix(CACHE_PREFIX)
    return res.data[0]


@router.patch(
    "/{product_id}",
    response_model=ProductRead,
    summary="Update Product",
    dependencies=[Depends(requires_permission("edit_products"))],
)
def update_product(product_id: str, payload: ProductUpdate):
    updates = sanitize(payload.model_dump(exclude_unset=True))
    if not updates:
        raise HTTPException(400, "No fields to update")

    client = _client()

    try:
        res = client.table(TABLE).update(updates).eq("id", product_id).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update product")

    if not res.data:
        raise HTTPException(404, "Product not found")

    cache_delete_prefix(CACHE_PREFIX)
    return res.data[0]


@router.delete(
    "/{product_id}",
    summary="Delete Product",
    dependencies=[Depends(requires_permission("delete_products"))],
)
def delete_product(product_id: str):
    client = _client()

    try:
        res = client.table(TABLE).delete().eq("id", product_id).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete product")

    if not res.data:
        raise HTTPException(404, "Product not found")

    cache_delete_prefix(CACHE_PREFIX)
    return {"success": True, "deleted_id": product_id}
