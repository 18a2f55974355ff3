# -------------------------
# Enums
# -------------------------
from .enums import (
    AccessMethod,
    AccessOutcome,
    ExternalRoleCode,
    GuardMode,
    LookupStatus,
    Role,
    RoleChangeAction,
    RoleTier,
    RoleType,
)

# -------------------------
# Permission Models
# -------------------------
from .permissions import (
    AccessDecision,
    ConditionalCheckRequest,
    EffectiveRoleResult,
    EnhancedPermissionSet,
    MyPermissionsRead,
    PermissionSet,
    RoleInfo,
)

# -------------------------
# Facility / Product Models
# -------------------------
from .facility import FacilityCreate, FacilityRead, FacilityUpdate
from .product import ProductCreate, ProductRead, ProductSummary, ProductUpdate

# -------------------------
# Conditional Permissions
# -------------------------
from .conditional_permission import (
    ConditionalPermissionCreate,
    ConditionalPermissionRead,
    PermissionConditions,
    TimeWindow,
)

__all__ = [
    # enums
    "AccessMethod",
    "AccessOutcome",
    "ExternalRoleCode",
    "GuardMode",
    "LookupStatus",
    "Role",
    "RoleChangeAction",
    "RoleTier",
    "RoleType",

    # permissions
    "AccessDecision",
    "ConditionalCheckRequest",
    "EffectiveRoleResult",
    "EnhancedPermissionSet",
    "MyPermissionsRead",
    "PermissionSet",
    "RoleInfo",

    # facilities / products
    "FacilityCreate",
    "FacilityRead",
    "FacilityUpdate",
    "ProductCreate",
    "ProductRead",
    "ProductSummary",
    "ProductUpdate",

    # conditional permissions
    "ConditionalPermissionCreate",
    "ConditionalPermissionRead",
    "PermissionConditions",
    "TimeWindow",
]
