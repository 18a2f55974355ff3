# core/conditional_permissions.py

from typing import List, Optional

from fastapi import HTTPException

from core.errors import handle_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from models.conditional_permission import (
    ConditionalPermissionCreate,
    ConditionalPermissionRead,
)


TABLE = "conditional_permissions"


def _client():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


def create_conditional_permission(
    payload: ConditionalPermissionCreate,
    granted_by: str,
) -> ConditionalPermissionRead:
    client = _client()

    row = {
        "user_id": payload.user_id,
        "facility_id": payload.facility_id,
        "permission_name": payload.permission_name,
        "conditions": payload.conditions.model_dump(exclude_none=True),
        "granted_by": granted_by,
        "expires_at": payload.expires_at.isoformat() if payload.expires_at else None,
    }

    try:
        result = client.table(TABLE).insert(row).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create conditional permission")

    if not result.data:
        raise HTTPException(500, "Insert returned no data")

    logger.info(
        f"Conditional permission '{payload.permission_name}' granted to "
        f"{payload.user_id} at {payload.facility_id} by {granted_by}"
    )
    return ConditionalPermissionRead(**result.data[0])


def list_conditional_permissions(
    facility_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> List[ConditionalPermissionRead]:
    """Active grants, newest first. Evaluation stays server-side."""
    client = _client()

    try:
        query = client.table(TABLE).select("*").eq("is_active", True)
        if facility_id:
            query = query.eq("facility_id", facility_id)
        if user_id:
            query = query.eq("user_id", user_id)
        result = query.order("created_at", desc=True).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch conditional permissions")

    return [ConditionalPermissionRead(**row) for row in (result.data or [])]


def get_conditional_permission(permission_id: str) -> ConditionalPermissionRead:
    client = _client()

    try:
        result = (
            client.table(TABLE)
            .select("*")
            .eq("id", permission_id)
            .maybe_single()
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load conditional permission")

    if result is None or not result.data:
        raise HTTPException(404, "Conditional permission not found")

    return ConditionalPermissionRead(**result.data)


def deactivate_conditional_permission(permission_id: str) -> ConditionalPermissionRead:
    client = _client()

    try:
        result = (
            client.table(TABLE)
            .update({"is_active": False})
            .eq("id", permission_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to deactivate conditional permission")

    if not result.data:
        raise HTTPException(404, "Conditional permission not found")

    return ConditionalPermissionRead(**result.data[0])
