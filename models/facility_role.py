# models/facility_role.py

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from core.roles import to_internal
from models.enums import Role


class FacilityRoleAssign(BaseModel):
    """Grant a role to a user at one facility."""
    user_id: str
    facility_id: str
    role: Role


class FacilityRoleBulkAssign(BaseModel):
    user_ids: List[str] = Field(..., min_length=1)
    facility_id: str
    role: Role


class FacilityRoleRead(BaseModel):
    """Row of facility_specific_roles with the role mapped to the app vocabulary."""
    id: str
    user_id: str
    facility_id: str
    role: Role
    granted_by: Optional[str] = None
    granted_at: Optional[datetime] = None
    is_active: bool = True

    model_config = {"from_attributes": True}

    @field_validator("role", mode="before")
    @classmethod
    def map_role(cls, v):
        return to_internal(v)


class BulkAssignResult(BaseModel):
    facility_id: str
    role: Role
    requested: int
    assigned: int
