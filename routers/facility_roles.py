# routers/facility_roles.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool

from core.facility_roles import (
    assign_facility_role,
    bulk_assign_facility_roles,
    get_facility_role,
    get_facility_roles,
    get_role_history,
    get_user_facility_roles,
    revoke_facility_role,
    revoke_user_facility_role,
)
from core.permission_helpers import (
    RoleValidation,
    ensure_can_manage_facility,
    requires_permission,
)
from dependencies.auth import CurrentUser, get_current_user
from models.facility_role import (
    BulkAssignResult,
    FacilityRoleAssign,
    FacilityRoleBulkAssign,
    FacilityRoleRead,
)


router = APIRouter(
    prefix="/facility-roles",
    tags=["Facility Roles"],
)


# -----------------------------------------------------
# Helper: callers only hand out or take away roles below their own
# -----------------------------------------------------
def ensure_can_assign(current_user: CurrentUser, role):
    if not RoleValidation(current_user.role).can_assign_role(role):
        raise HTTPException(
            status_code=403,
            detail=f"Role '{current_user.role}' cannot assign or revoke role '{role}'",
        )


# ============================================================
# ASSIGN
# ============================================================
@router.post("", response_model=FacilityRoleRead, status_code=201, summary="Assign a facility role")
async def assign_role(
    payload: FacilityRoleAssign,
    current_user: CurrentUser = Depends(get_current_user),
):
    ensure_can_assign(current_user, payload.role)
    await ensure_can_manage_facility(current_user, payload.facility_id)

    return await run_in_threadpool(
        assign_facility_role,
        payload.user_id,
        payload.facility_id,
        payload.role,
        current_user.id,
    )


@router.post("/bulk", response_model=BulkAssignResult, summary="Assign one role to many users")
async def bulk_assign(
    payload: FacilityRoleBulkAssign,
    current_user: CurrentUser = Depends(get_current_user),
):
    ensure_can_assign(current_user, payload.role)
    await ensure_can_manage_facility(current_user, payload.facility_id)

    assigned = await run_in_threadpool(
        bulk_assign_facility_roles,
        payload.user_ids,
        payload.facility_id,
        payload.role,
        current_user.id,
    )
    return BulkAssignResult(
        facility_id=payload.facility_id,
        role=payload.role,
        requested=len(payload.user_ids),
        assigned=assigned,
    )


# ============================================================
# REVOKE (soft)
# ============================================================
@router.delete("/{role_id}", response_model=FacilityRoleRead, summary="Revoke a facility role")
async def revoke_role(
    role_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    existing = await run_in_threadpool(get_facility_role, role_id)
    ensure_can_assign(current_user, existing.role)
    await ensure_can_manage_facility(current_user, existing.facility_id)

    return await run_in_threadpool(revoke_facility_role, role_id, current_user.id)


@router.post("/revoke", response_model=FacilityRoleRead, summary="Revoke by user, facility and role")
async def revoke_role_for_user(
    payload: FacilityRoleAssign,
    current_user: CurrentUser = Depends(get_current_user),
):
    ensure_can_assign(current_user, payload.role)
    await ensure_can_manage_facility(current_user, payload.facility_id)

    return await run_in_threadpool(
        revoke_user_facility_role,
        payload.user_id,
        payload.facility_id,
        payload.role,
        current_user.id,
    )


# ============================================================
# READS
# ============================================================
@router.get("/facility/{facility_id}", response_model=List[FacilityRoleRead], summary="Active roles at a facility")
def list_facility_roles(
    facility_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    return get_facility_roles(facility_id)


@router.get("/user/{user_id}", response_model=List[FacilityRoleRead], summary="Active facility roles of a user")
def list_user_roles(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    if user_id != current_user.id and not RoleValidation(current_user.role).can_manage_users():
        raise HTTPException(403, "Cannot view another user's facility roles")
    return get_user_facility_roles(user_id)


@router.get(
    "/history",
    response_model=List[FacilityRoleRead],
    summary="All grants including revoked ones",
    dependencies=[Depends(requires_permission("can_view_audit_logs"))],
)
def role_history(
    facility_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
):
    return get_role_history(facility_id=facility_id, user_id=user_id)
