# routers/admin.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.errors import handle_supabase_error
from core.permission_helpers import requires_permission
from core.remote_auth import check_has_elevated_users
from core.supabase_client import get_supabase_client
from models.audit import PermissionUsageEntry, RoleAuditEntry
from models.enums import AccessOutcome


router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)


# -----------------------------------------------------
# GET /admin/bootstrap-status
# No auth: the first-admin setup screen calls this before anyone exists
# -----------------------------------------------------
@router.get("/bootstrap-status", summary="Is first-admin setup still open?")
async def bootstrap_status():
    decision = await check_has_elevated_users()

    if decision.outcome == AccessOutcome.unknown:
        # Neither "open" nor "closed": the UI shows a retry state
        return {"status": "unknown", "has_national_users": None, "detail": decision.detail}

    has_national = decision.outcome == AccessOutcome.allowed
    return {
        "status": "ok",
        "has_national_users": has_national,
        "first_admin_setup_open": not has_national,
    }


# -----------------------------------------------------
# Audit trails
# -----------------------------------------------------
@router.get(
    "/role-audit-log",
    response_model=List[RoleAuditEntry],
    dependencies=[Depends(requires_permission("can_view_audit_logs"))],
)
def role_audit_log(
    facility_id: Optional[str] = Query(None),
    target_user_id: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
):
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    try:
        query = client.table("role_audit_log").select("*")
        if facility_id:
            query = query.eq("facility_id", facility_id)
        if target_user_id:
            query = query.eq("target_user_id", target_user_id)
        if action:
            query = query.eq("action", action)
        result = query.order("created_at", desc=True).limit(limit).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch role audit log")

    return [RoleAuditEntry(**row) for row in (result.data or [])]


@router.get(
    "/permission-usage",
    response_model=List[PermissionUsageEntry],
    dependencies=[Depends(requires_permission("can_view_audit_logs"))],
)
def permission_usage_log(
    facility_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    granted: Optional[bool] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
):
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    try:
        query = client.table("permission_usage_log").select("*")
        if facility_id:
            query = query.eq("facility_id", facility_id)
        if user_id:
            query = query.eq("user_id", user_id)
        if granted is not None:
            query = query.eq("access_granted", granted)
        result = query.order("created_at", desc=True).limit(limit).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch permission usage log")

    return [PermissionUsageEntry(**row) for row in (result.data or [])]
