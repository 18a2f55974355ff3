from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# ROLE (application vocabulary)
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Closed set of roles used everywhere inside the API."""

    national = "national"
    regional = "regional"
    zonal = "zonal"
    facility_manager = "facility_manager"
    program_manager = "program_manager"
    data_analyst = "data_analyst"
    finance = "finance"
    procurement = "procurement"
    qa = "qa"
    facility_officer = "facility_officer"
    viewer = "viewer"


# -----------------------------------------------------
# EXTERNAL ROLE CODE (Supabase public.user_role enum)
# -----------------------------------------------------
class ExternalRoleCode(BaseStrEnum):
    """Values of the database user_role enum, legacy codes included."""

    national = "national"
    regional = "regional"
    zonal = "zonal"
    facility_manager = "facility_manager"
    program_manager = "program_manager"
    data_analyst = "data_analyst"
    finance = "finance"
    procurement = "procurement"
    qa = "qa"
    facility_officer = "facility_officer"
    viewer = "viewer"

    # Legacy codes still present in older rows
    admin = "admin"
    manager = "manager"
    analyst = "analyst"


# -----------------------------------------------------
# ROLE TIER (grouping used by UI navigation)
# -----------------------------------------------------
class RoleTier(BaseStrEnum):
    system = "system"
    administrator = "administrator"
    facility = "facility"
    specialist = "specialist"
    viewer = "viewer"


# -----------------------------------------------------
# ACCESS OUTCOME (remote authorization result)
# -----------------------------------------------------
class AccessOutcome(BaseStrEnum):
    """
    Tri-state result of a server-side authorization check.
    `unknown` means the check could not be completed (timeout, network,
    server error) and must never be read as allowed.
    """

    allowed = "allowed"
    denied = "denied"
    unknown = "unknown"


class LookupStatus(BaseStrEnum):
    resolved = "resolved"
    unknown = "unknown"


# -----------------------------------------------------
# ROLE GUARD MODE
# -----------------------------------------------------
class GuardMode(BaseStrEnum):
    """enforcing rejects; audit_only logs the miss and lets the request through."""

    enforcing = "enforcing"
    audit_only = "audit_only"


# -----------------------------------------------------
# AUDIT VOCABULARY
# -----------------------------------------------------
class RoleChangeAction(BaseStrEnum):
    assign = "assign"
    revoke = "revoke"
    bulk_assign = "bulk_assign"


class RoleType(BaseStrEnum):
    global_role = "global"
    facility_specific = "facility_specific"


class AccessMethod(BaseStrEnum):
    global_role = "global_role"
    facility_role = "facility_role"
    conditional = "conditional"
