# core/permissions.py

from typing import Dict

from core.roles import has_higher_or_equal_rank, is_valid_role
from models.enums import Role
from models.permissions import EnhancedPermissionSet, PermissionSet


def _grant(*flags: str) -> PermissionSet:
    """Build a PermissionSet with only the named flags enabled."""
    unknown = set(flags) - set(PermissionSet.model_fields)
    if unknown:
        raise ValueError(f"Unknown permission flags: {sorted(unknown)}")
    return PermissionSet(**{name: name in flags for name in PermissionSet.model_fields})


ALL_FLAGS = tuple(PermissionSet.model_fields)


# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
ROLE_PERMISSIONS: Dict[Role, PermissionSet] = {

    # =====================================================
    # NATIONAL: Full access to everything
    # =====================================================
    Role.national: _grant(*ALL_FLAGS),

    # =====================================================
    # REGIONAL: everything except system configuration
    # =====================================================
    Role.regional: _grant(*(f for f in ALL_FLAGS if f != "manage_system")),

    # =====================================================
    # ZONAL
    # =====================================================
    Role.zonal: _grant(*(
        f for f in ALL_FLAGS if f not in ("manage_system", "system_integration")
    )),

    # =====================================================
    # FACILITY MANAGER: runs one facility, approves associations
    # =====================================================
    Role.facility_manager: _grant(
        "create_products", "edit_products", "view_products",
        "import_data", "export_data",
        "view_analytics", "data_analysis", "scenario_planning",
        "audit_trail",
        "view_reports", "advanced_reports",
        "manage_facilities", "approve_associations",
    ),

    # =====================================================
    # PROGRAM MANAGER
    # =====================================================
    Role.program_manager: _grant(
        "view_products", "export_data",
        "view_analytics", "data_analysis", "scenario_planning",
        "view_reports", "advanced_reports",
    ),

    # =====================================================
    # DATA ANALYST
    # =====================================================
    Role.data_analyst: _grant(
        "view_products", "export_data",
        "view_analytics", "data_analysis", "scenario_planning",
        "view_reports", "advanced_reports",
    ),

    # =====================================================
    # FINANCE
    # =====================================================
    Role.finance: _grant(
        "view_products", "export_data",
        "view_analytics",
        "view_reports", "advanced_reports",
    ),

    # =====================================================
    # PROCUREMENT
    # =====================================================
    Role.procurement: _grant(
        "create_products", "edit_products", "view_products",
        "import_data", "export_data",
        "view_analytics",
        "view_reports",
    ),

    # =====================================================
    # QUALITY ASSURANCE
    # =====================================================
    Role.qa: _grant(
        "view_products",
        "view_analytics",
        "audit_trail",
        "view_reports",
    ),

    # =====================================================
    # FACILITY OFFICER: data entry at one facility
    # =====================================================
    Role.facility_officer: _grant(
        "create_products", "edit_products", "view_products",
        "import_data",
        "view_reports",
    ),

    # =====================================================
    # FALLBACK
    # =====================================================
    Role.viewer: _grant("view_products", "view_reports"),
}

if set(ROLE_PERMISSIONS) != set(Role):
    raise RuntimeError("ROLE_PERMISSIONS must define every role")


ADMINISTRATOR_ROLES = frozenset({Role.national, Role.regional, Role.zonal})


def base_permissions(role: Role) -> PermissionSet:
    """Catalog entry for `role`; viewer set for anything outside the catalog."""
    if not is_valid_role(role):
        return ROLE_PERMISSIONS[Role.viewer]
    return ROLE_PERMISSIONS[Role(role)]


def enhance_permissions(base: PermissionSet, role: Role) -> EnhancedPermissionSet:
    """
    Add hierarchy-derived flags to a base permission set.

    Pure: returns a new object and leaves `base` untouched.
    """
    role = Role(role) if is_valid_role(role) else Role.viewer

    return EnhancedPermissionSet(
        **base.model_dump(),
        has_admin_access=has_higher_or_equal_rank(role, Role.zonal),
        has_manager_access=has_higher_or_equal_rank(role, Role.facility_manager),
        has_analyst_access=has_higher_or_equal_rank(role, Role.data_analyst),
        can_create_facilities=role in ADMINISTRATOR_ROLES,
        can_manage_global_roles=role in ADMINISTRATOR_ROLES,
        can_view_audit_logs=has_higher_or_equal_rank(role, Role.qa),
        can_export_sensitive_data=has_higher_or_equal_rank(role, Role.finance),
    )


def get_permissions(role: Role) -> EnhancedPermissionSet:
    return enhance_permissions(base_permissions(role), role)


def check_permission(permissions: PermissionSet, permission: str) -> bool:
    """Look up a flag by name; unknown names are never granted."""
    if permission not in type(permissions).model_fields:
        return False
    return getattr(permissions, permission) is True


def has_minimum_role(role: Role, minimum_role: Role) -> bool:
    return has_higher_or_equal_rank(role, minimum_role)
