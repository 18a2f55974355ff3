from typing import Iterable, List, Optional

from fastapi import Depends, HTTPException

from core.config import settings
from core.logging_config import logger
from core.permissions import (
    ADMINISTRATOR_ROLES,
    check_permission,
    get_permissions,
)
from core.remote_auth import can_manage_facility_roles
from core.roles import (
    get_assignable_roles,
    get_role_tier,
    has_higher_or_equal_rank,
    has_higher_rank,
    is_valid_role,
)
from dependencies.auth import CurrentUser, get_current_user
from models.enums import GuardMode, Role, RoleTier
from models.permissions import AccessDecision


# -----------------------------------------------------
# Pure predicates (role passed in explicitly)
# -----------------------------------------------------
def can_manage_roles(role: Role) -> bool:
    return role in ADMINISTRATOR_ROLES


def can_approve_associations(role: Role) -> bool:
    return role in ADMINISTRATOR_ROLES or role == Role.facility_manager


def can_assign_role(role: Role, target_role: Role) -> bool:
    """A role may only hand out roles strictly below itself."""
    return target_role in get_assignable_roles(role)


def can_create_facilities(role: Role) -> bool:
    return role in ADMINISTRATOR_ROLES


class RoleValidation:
    """
    Advisory role checks for one subject role.

    Used to decide what the dashboard shows. Every mutating call is still
    re-checked by the database (RLS + RPCs).
    """

    def __init__(self, role: Role):
        self.role = role

    # Basic role checks
    def has_role(self, role: Role) -> bool:
        return self.role == role

    def has_minimum_role(self, minimum_role: Role) -> bool:
        return has_higher_or_equal_rank(self.role, minimum_role)

    # Administrative capabilities
    def can_manage_roles(self) -> bool:
        return can_manage_roles(self.role)

    def can_approve_associations(self) -> bool:
        return can_approve_associations(self.role)

    def can_assign_role(self, target_role: Role) -> bool:
        return can_assign_role(self.role, target_role)

    # Specific permission checks
    def can_create_facilities(self) -> bool:
        return can_create_facilities(self.role)

    def can_view_system_analytics(self) -> bool:
        return has_higher_or_equal_rank(self.role, Role.data_analyst)

    def can_manage_users(self) -> bool:
        return has_higher_or_equal_rank(self.role, Role.zonal)

    def can_access_admin_dashboard(self) -> bool:
        return has_higher_or_equal_rank(self.role, Role.zonal)

    def can_modify_system_settings(self) -> bool:
        return has_higher_or_equal_rank(self.role, Role.regional)

    # Validation utilities
    @staticmethod
    def is_valid_role(value) -> bool:
        return is_valid_role(value)

    def get_assignable_roles(self) -> List[Role]:
        return get_assignable_roles(self.role)

    # Role comparison
    def is_higher_role_than(self, other: Role) -> bool:
        return has_higher_rank(self.role, other)

    def is_same_role_as(self, other: Role) -> bool:
        return self.role == other

    # Role context helpers
    def is_administrator(self) -> bool:
        return get_role_tier(self.role) in (RoleTier.system, RoleTier.administrator)

    def is_facility_level(self) -> bool:
        return get_role_tier(self.role) == RoleTier.facility

    def is_specialist(self) -> bool:
        return get_role_tier(self.role) == RoleTier.specialist

    def is_system_level(self) -> bool:
        return get_role_tier(self.role) == RoleTier.system


# -----------------------------------------------------
# Guard mode
# -----------------------------------------------------
def resolve_guard_mode(mode: Optional[GuardMode] = None) -> GuardMode:
    if mode is not None:
        return GuardMode(mode)
    try:
        return GuardMode(settings.ROLE_GUARD_MODE)
    except ValueError:
        return GuardMode.enforcing


def _reject_or_audit(user: CurrentUser, mode: GuardMode, detail: str):
    if mode == GuardMode.audit_only:
        logger.warning(
            f"Role guard (audit-only) let through user={user.id} role={user.role}: {detail}"
        )
        return
    raise HTTPException(status_code=403, detail=detail)


# -----------------------------------------------------
# FastAPI dependency wrappers
# -----------------------------------------------------
def requires_role(allowed_roles: Iterable[Role], mode: Optional[GuardMode] = None):
    """
    Usage:
        @router.get("/", dependencies=[Depends(requires_role([Role.national]))])
    """
    allowed = [Role(r) for r in allowed_roles]

    def checker(current_user: CurrentUser = Depends(get_current_user)):
        if current_user.role not in allowed:
            _reject_or_audit(
                current_user,
                resolve_guard_mode(mode),
                f"Requires one of: {[r.value for r in allowed]}",
            )
        return current_user

    return checker


def requires_minimum_role(minimum_role: Role, mode: Optional[GuardMode] = None):
    minimum_role = Role(minimum_role)

    def checker(current_user: CurrentUser = Depends(get_current_user)):
        if not has_higher_or_equal_rank(current_user.role, minimum_role):
            _reject_or_audit(
                current_user,
                resolve_guard_mode(mode),
                f"Requires role '{minimum_role.value}' or higher",
            )
        return current_user

    return checker


def requires_permission(permission: str):
    """
    Usage:
        @router.post("/", dependencies=[Depends(requires_permission("create_products"))])

    Always enforcing.
    """

    def dependency(current_user: CurrentUser = Depends(get_current_user)):
        if not check_permission(get_permissions(current_user.role), permission):
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions: '{permission}' required"
            )
        return current_user

    return dependency


# -----------------------------------------------------
# Remote decision → HTTP
# -----------------------------------------------------
def raise_for_decision(decision: AccessDecision, what: str = "this resource"):
    """
    denied  -> 403
    unknown -> 503 (could not verify; never treated as granted)
    """
    if decision.is_allowed:
        return
    if decision.is_unknown:
        raise HTTPException(
            status_code=503,
            detail=f"Unable to verify access to {what}. Please retry.",
        )
    raise HTTPException(status_code=403, detail=f"Access denied to {what}")


async def ensure_can_manage_facility(current_user: CurrentUser, facility_id: str):
    """
    Global administrators pass locally; everyone else needs the database to
    confirm super-admin or owner access to the facility.
    """
    if can_manage_roles(current_user.role):
        return
    decision = await can_manage_facility_roles(current_user.id, facility_id)
    raise_for_decision(decision, f"role management for facility {facility_id}")
