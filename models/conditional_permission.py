# models/conditional_permission.py

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator


class TimeWindow(BaseModel):
    """Hours are [start_hour, end_hour) in facility local time; days 0=Sunday."""
    start_hour: int = Field(..., ge=0, le=23)
    end_hour: int = Field(..., ge=1, le=24)
    allowed_days: Optional[List[int]] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be after start_hour")
        if self.allowed_days is not None:
            if not self.allowed_days:
                raise ValueError("allowed_days cannot be empty")
            if any(d < 0 or d > 6 for d in self.allowed_days):
                raise ValueError("allowed_days must be between 0 and 6")
        return self


class LocationConstraints(BaseModel):
    required_facility: Optional[str] = None


class PermissionConditions(BaseModel):
    time_windows: Optional[List[TimeWindow]] = None
    location_constraints: Optional[LocationConstraints] = None


class ConditionalPermissionCreate(BaseModel):
    user_id: str
    facility_id: str
    permission_name: str = Field(..., min_length=1)
    conditions: PermissionConditions
    expires_at: Optional[datetime] = None


class ConditionalPermissionRead(BaseModel):
    id: str
    user_id: str
    facility_id: Optional[str] = None
    permission_name: str
    conditions: PermissionConditions = Field(default_factory=PermissionConditions)
    is_active: bool = True
    granted_by: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
