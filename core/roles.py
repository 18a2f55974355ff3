# core/roles.py

from typing import Any, Dict, List

from core.logging_config import logger
from models.enums import ExternalRoleCode, Role, RoleTier


# ============================================
# ROLE HIERARCHY (higher rank = more privileged)
# ============================================
ROLE_HIERARCHY: Dict[Role, int] = {
    Role.viewer: 1,
    Role.facility_officer: 2,
    Role.qa: 3,
    Role.procurement: 4,
    Role.finance: 5,
    Role.data_analyst: 6,
    Role.program_manager: 7,
    Role.facility_manager: 8,
    Role.zonal: 9,
    Role.regional: 10,
    Role.national: 11,
}

DEFAULT_ROLE = Role.viewer


# ============================================
# ROLE ↔ EXTERNAL CODE
# ============================================
# One code per role; the database enum spells them identically.
ROLE_TO_EXTERNAL: Dict[Role, ExternalRoleCode] = {
    role: ExternalRoleCode(role.value) for role in Role
}

EXTERNAL_TO_ROLE: Dict[ExternalRoleCode, Role] = {
    **{code: role for role, code in ROLE_TO_EXTERNAL.items()},

    # Legacy codes
    ExternalRoleCode.admin: Role.national,
    ExternalRoleCode.manager: Role.facility_manager,
    ExternalRoleCode.analyst: Role.data_analyst,
}


# ============================================
# DISPLAY + GROUPING
# ============================================
ROLE_DISPLAY_NAMES: Dict[Role, str] = {
    Role.national: "National Administrator",
    Role.regional: "Regional Administrator",
    Role.zonal: "Zonal Administrator",
    Role.facility_manager: "Facility Manager",
    Role.program_manager: "Program Manager",
    Role.data_analyst: "Data Analyst",
    Role.finance: "Finance Officer",
    Role.procurement: "Procurement Officer",
    Role.qa: "Quality Assurance",
    Role.facility_officer: "Facility Officer",
    Role.viewer: "Viewer",
}

ROLE_TIERS: Dict[Role, RoleTier] = {
    Role.national: RoleTier.system,
    Role.regional: RoleTier.system,
    Role.zonal: RoleTier.administrator,
    Role.facility_manager: RoleTier.facility,
    Role.facility_officer: RoleTier.facility,
    Role.program_manager: RoleTier.specialist,
    Role.data_analyst: RoleTier.specialist,
    Role.finance: RoleTier.specialist,
    Role.procurement: RoleTier.specialist,
    Role.qa: RoleTier.specialist,
    Role.viewer: RoleTier.viewer,
}


def _assert_exhaustive(table: dict, name: str):
    missing = set(Role) - set(table)
    if missing:
        raise RuntimeError(f"{name} is missing roles: {sorted(r.value for r in missing)}")


for _table, _name in (
    (ROLE_HIERARCHY, "ROLE_HIERARCHY"),
    (ROLE_DISPLAY_NAMES, "ROLE_DISPLAY_NAMES"),
    (ROLE_TIERS, "ROLE_TIERS"),
):
    _assert_exhaustive(_table, _name)

if len(set(ROLE_HIERARCHY.values())) != len(ROLE_HIERARCHY):
    raise RuntimeError("ROLE_HIERARCHY ranks must be unique")


# ============================================
# VALIDATION
# ============================================
def is_valid_role(value: Any) -> bool:
    return isinstance(value, str) and value in Role.list()


def is_valid_external_code(value: Any) -> bool:
    return isinstance(value, str) and value in ExternalRoleCode.list()


# ============================================
# MAPPER
# ============================================
def to_external(role: Role) -> ExternalRoleCode:
    """Role → database user_role code. Input must already be a Role."""
    return ROLE_TO_EXTERNAL[Role(role)]


def to_internal(code: Any) -> Role:
    """
    Database user_role code (or any untrusted value) → Role.

    Never raises. Anything unrecognised degrades to the least-privileged
    role so malformed data can only reduce access.
    """
    if not code:
        logger.warning("No role code provided, defaulting to viewer")
        return DEFAULT_ROLE

    if not is_valid_external_code(code):
        logger.warning(f"Unmapped role code {code!r}, defaulting to viewer")
        return DEFAULT_ROLE

    return EXTERNAL_TO_ROLE[ExternalRoleCode(code)]


# ============================================
# HIERARCHY COMPARATOR
# ============================================
def rank(role: Role) -> int:
    if not isinstance(role, Role):
        raise TypeError(f"rank() expects a Role, got {role!r}")
    return ROLE_HIERARCHY[role]


def has_higher_or_equal_rank(role: Role, required: Role) -> bool:
    return rank(role) >= rank(required)


def has_higher_rank(role: Role, other: Role) -> bool:
    return rank(role) > rank(other)


def get_assignable_roles(role: Role) -> List[Role]:
    """Roles strictly below `role`, most privileged first."""
    level = rank(role)
    return sorted(
        (r for r in Role if ROLE_HIERARCHY[r] < level),
        key=lambda r: ROLE_HIERARCHY[r],
        reverse=True,
    )


def roles_by_rank() -> List[Role]:
    """Every role, most privileged first."""
    return sorted(Role, key=lambda r: ROLE_HIERARCHY[r], reverse=True)


def get_role_display_name(role: Role) -> str:
    return ROLE_DISPLAY_NAMES[Role(role)]


def get_role_tier(role: Role) -> RoleTier:
    return ROLE_TIERS[Role(role)]
