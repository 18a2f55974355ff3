# models/permissions.py

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from models.enums import AccessOutcome, LookupStatus, Role


class PermissionSet(BaseModel):
    """Fixed capability flags granted by a role. Every field is required."""

    model_config = ConfigDict(frozen=True)

    create_products: bool
    edit_products: bool
    delete_products: bool
    view_products: bool
    import_data: bool
    export_data: bool
    view_analytics: bool
    data_analysis: bool
    system_integration: bool
    audit_trail: bool
    scenario_planning: bool
    manage_users: bool
    view_reports: bool
    manage_system: bool
    advanced_reports: bool
    manage_facilities: bool
    approve_associations: bool
    manage_roles: bool


class EnhancedPermissionSet(PermissionSet):
    """PermissionSet plus flags derived from the role hierarchy."""

    has_admin_access: bool
    has_manager_access: bool
    has_analyst_access: bool
    can_create_facilities: bool
    can_manage_global_roles: bool
    can_view_audit_logs: bool
    can_export_sensitive_data: bool


# -----------------------------------------------------
# API payloads
# -----------------------------------------------------
class RoleInfo(BaseModel):
    role: Role
    display_name: str
    rank: int
    tier: str


class MyPermissionsRead(BaseModel):
    role: Role
    display_name: str
    rank: int
    permissions: EnhancedPermissionSet
    assignable_roles: List[Role]


class AccessDecision(BaseModel):
    """Result of a remote authorization check."""

    outcome: AccessOutcome
    detail: Optional[str] = None

    @property
    def is_allowed(self) -> bool:
        # unknown is treated as deny for gating
        return self.outcome == AccessOutcome.allowed

    @property
    def is_unknown(self) -> bool:
        return self.outcome == AccessOutcome.unknown

    @classmethod
    def from_bool(cls, value) -> "AccessDecision":
        return cls(outcome=AccessOutcome.allowed if value else AccessOutcome.denied)

    @classmethod
    def unknown(cls, detail: str) -> "AccessDecision":
        return cls(outcome=AccessOutcome.unknown, detail=detail)


class EffectiveRoleResult(BaseModel):
    """Role governing a user at one facility, as resolved by the database."""

    status: LookupStatus
    user_id: str
    facility_id: str
    role: Optional[Role] = None
    detail: Optional[str] = None

    @property
    def is_unknown(self) -> bool:
        return self.status == LookupStatus.unknown


class ConditionalCheckRequest(BaseModel):
    user_id: Optional[str] = Field(None, description="Defaults to the caller")
    facility_id: str
    permission_name: str = Field(..., min_length=1)
    context: dict = Field(default_factory=dict, description="Caller location / client context")
