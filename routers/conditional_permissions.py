# routers/conditional_permissions.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool

from core.conditional_permissions import (
    create_conditional_permission,
    deactivate_conditional_permission,
    get_conditional_permission,
    list_conditional_permissions,
)
from core.permission_helpers import (
    RoleValidation,
    ensure_can_manage_facility,
    requires_minimum_role,
)
from dependencies.auth import CurrentUser
from models.conditional_permission import (
    ConditionalPermissionCreate,
    ConditionalPermissionRead,
)
from models.enums import Role


router = APIRouter(
    prefix="/conditional-permissions",
    tags=["Conditional Permissions"],
)


# Facility managers and above, and only at facilities they manage.
# The service-role client bypasses row-level security, so every
# facility check happens here.
grantor = requires_minimum_role(Role.facility_manager)


@router.post("", response_model=ConditionalPermissionRead, status_code=201)
async def create_permission(
    payload: ConditionalPermissionCreate,
    current_user: CurrentUser = Depends(grantor),
):
    await ensure_can_manage_facility(current_user, payload.facility_id)
    return await run_in_threadpool(
        create_conditional_permission, payload, granted_by=current_user.id
    )


@router.get("", response_model=List[ConditionalPermissionRead])
async def list_permissions(
    facility_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(grantor),
):
    if not RoleValidation(current_user.role).can_manage_roles():
        if not facility_id:
            raise HTTPException(400, "facility_id is required")
        await ensure_can_manage_facility(current_user, facility_id)

    return await run_in_threadpool(
        list_conditional_permissions, facility_id=facility_id, user_id=user_id
    )


@router.delete("/{permission_id}", response_model=ConditionalPermissionRead)
async def deactivate_permission(
    permission_id: str,
    current_user: CurrentUser = Depends(grantor),
):
    existing = await run_in_threadpool(get_conditional_permission, permission_id)
    await ensure_can_manage_facility(current_user, existing.facility_id)

    return await run_in_threadpool(deactivate_conditional_permission, permission_id)
