# models/audit.py

from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import BaseModel, field_validator

from core.roles import to_internal
from models.enums import Role


class RoleAuditEntry(BaseModel):
    """Row of role_audit_log."""
    id: str
    user_id: str
    target_user_id: str
    action: str
    role_type: str
    old_role: Optional[Role] = None
    new_role: Optional[Role] = None
    facility_id: Optional[str] = None
    reason: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    @field_validator("old_role", "new_role", mode="before")
    @classmethod
    def map_role(cls, v):
        return to_internal(v) if v else None


class PermissionUsageEntry(BaseModel):
    """Row of permission_usage_log."""
    id: str
    user_id: str
    permission_name: str
    resource_type: str
    resource_id: Optional[str] = None
    facility_id: Optional[str] = None
    access_granted: bool
    access_method: Optional[str] = None
    conditions_met: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
