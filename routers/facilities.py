# routers/facilities.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.cache import cache_delete_prefix, cache_get, cache_set
from core.config import settings
from core.errors import handle_supabase_error
from core.permission_helpers import requires_permission
from core.supabase_client import get_supabase_client
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_current_user
from models.facility import FacilityCreate, FacilityRead, FacilityUpdate


router = APIRouter(
    prefix="/facilities",
    tags=["Facilities"]
)

TABLE = "health_facilities"
CACHE_PREFIX = "facilities:"


def _client():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


# ============================================================
# LIST FACILITIES
# ============================================================
@router.get(
    "",
    summary="List Facilities",
    description="""
    Retrieve health facilities with optional filtering.

    **Caching:** Unfiltered results are cached (`CACHE_TTL_SECONDS`).
    **Permissions:** Any authenticated user.
    """,
)
def list_facilities(
    limit: int = Query(100, ge=1, le=1000),
    region: Optional[str] = None,
    zone: Optional[str] = None,
    name: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    unfiltered = not region and not zone and not name
    cache_key = f"{CACHE_PREFIX}list:{limit}"

    if unfiltered:
        cached_result = cache_get(cache_key)
        if cached_result is not None:
            return cached_result

    client = _client()

    try:
        query = client.table(TABLE).select("*").limit(limit)
        if region:
            query = query.eq("region", region)
        if zone:
            query = query.eq("zone", zone)
        if name:
            query = query.ilike("name", f"%{name}%")
        res = query.execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch facilities")

    result = {"success": True, "data": res.data or []}

    if unfiltered:
        cache_set(cache_key, result, ttl_seconds=settings.CACHE_TTL_SECONDS)

    return result


# ============================================================
# GET FACILITY
# ============================================================
@router.get("/{facility_id}", response_model=FacilityRead, summary="Get Facility")
def get_facility(
    facility_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    client = _client()

    try:
        res = client.table(TABLE).select("*").eq("id", facility_id).limit(1).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch facility")

    if not res.data:
        raise HTTPException(404, "Facility not found")

    return res.data[0]


# ============================================================
# CREATE FACILITY: national / regional / zonal only
# ============================================================
@router.post(
    "",
    response_model=FacilityRead,
    status_code=201,
    summary="Create Facility",
)
def create_facility(
    payload: FacilityCreate,
    current_user: CurrentUser = Depends(requires_permission("can_create_facilities")),
):
    client = _client()
    data = sanitize(payload.model_dump())
    data["created_by"] = current_user.id

    try:
        res = client.table(TABLE).insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create facility")

    if not res.data:
        raise HTTPException(500, "Insert returned no data")

    cache_delete_prefix(CACHE_PREFIX)
    return res.data[0]


# ============================================================
# UPDATE FACILITY
# ============================================================
@router.patch(
    "/{facility_id}",
    response_model=FacilityRead,
    summary="Update Facility",
    dependencies=[Depends(requires_permission("manage_facilities"))],
)
def update_facility(facility_id: str, payload: FacilityUpdate):
    updates = sanitize(payload.model_dump(exclude_unset=True))
    if not updates:
        raise HTTPException(400, "No fields to update")

    client = _client()

    try:
        res = client.table(TABLE).update(updates).eq("id", facility_id).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update facility")

    if not res.data:
        raise HTTPException(404, "Facility not found")

    cache_delete_prefix(CACHE_PREFIX)
    return res.data[0]
