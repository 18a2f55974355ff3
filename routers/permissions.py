# routers/permissions.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.permission_helpers import RoleValidation, can_manage_roles
from core.permissions import get_permissions, has_minimum_role
from core.remote_auth import check_conditional_permission, get_effective_role_for_facility
from core.roles import (
    get_role_display_name,
    get_role_tier,
    rank,
    roles_by_rank,
)
from dependencies.auth import CurrentUser, get_current_user
from models.enums import Role
from models.permissions import (
    AccessDecision,
    ConditionalCheckRequest,
    EffectiveRoleResult,
    MyPermissionsRead,
    RoleInfo,
)


router = APIRouter(
    prefix="/permissions",
    tags=["Permissions"],
)


# -----------------------------------------------------
# GET /permissions/me
# Drives navigation and button visibility in the dashboard
# -----------------------------------------------------
@router.get("/me", response_model=MyPermissionsRead, summary="Permissions of the caller")
def my_permissions(current_user: CurrentUser = Depends(get_current_user)):
    validation = RoleValidation(current_user.role)
    return MyPermissionsRead(
        role=current_user.role,
        display_name=get_role_display_name(current_user.role),
        rank=rank(current_user.role),
        permissions=get_permissions(current_user.role),
        assignable_roles=validation.get_assignable_roles(),
    )


# -----------------------------------------------------
# GET /permissions/roles
# -----------------------------------------------------
@router.get("/roles", response_model=List[RoleInfo], summary="Role hierarchy, most privileged first")
def list_roles(current_user: CurrentUser = Depends(get_current_user)):
    return [
        RoleInfo(
            role=role,
            display_name=get_role_display_name(role),
            rank=rank(role),
            tier=str(get_role_tier(role)),
        )
        for role in roles_by_rank()
    ]


# -----------------------------------------------------
# GET /permissions/check?minimum_role=zonal
# -----------------------------------------------------
@router.get("/check", summary="Does the caller meet a minimum role?")
def check_minimum_role(
    minimum_role: Role = Query(...),
    current_user: CurrentUser = Depends(get_current_user),
):
    return {
        "role": current_user.role,
        "minimum_role": minimum_role,
        "allowed": has_minimum_role(current_user.role, minimum_role),
    }


# -----------------------------------------------------
# GET /permissions/effective-role?facility_id=...
# Informational: returns resolved|unknown, never guesses
# -----------------------------------------------------
@router.get(
    "/effective-role",
    response_model=EffectiveRoleResult,
    summary="Role governing a user at a facility",
)
async def effective_role(
    facility_id: str = Query(...),
    user_id: Optional[str] = Query(None, description="Defaults to the caller"),
    current_user: CurrentUser = Depends(get_current_user),
):
    target = user_id or current_user.id

    if target != current_user.id and not can_manage_roles(current_user.role):
        raise HTTPException(403, "Only administrators can look up other users' roles")

    return await get_effective_role_for_facility(target, facility_id)


# -----------------------------------------------------
# POST /permissions/conditional/check
# -----------------------------------------------------
@router.post(
    "/conditional/check",
    response_model=AccessDecision,
    summary="Evaluate a time/location-gated permission",
)
async def conditional_check(
    payload: ConditionalCheckRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    target = payload.user_id or current_user.id

    if target != current_user.id and not can_manage_roles(current_user.role):
        raise HTTPException(403, "Only administrators can check other users' permissions")

    return await check_conditional_permission(
        target,
        payload.facility_id,
        payload.permission_name,
        payload.context,
    )
