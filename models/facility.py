# models/facility.py

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class FacilityBase(BaseModel):
    name: str = Field(..., min_length=1)
    facility_type: str
    level: str
    region: str
    zone: str
    wereda: Optional[str] = None
    code: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    capacity: Optional[int] = Field(None, ge=0)
    staff_count: Optional[int] = Field(None, ge=0)
    operational_status: Optional[str] = None
    services_offered: Optional[List[str]] = None


class FacilityCreate(FacilityBase):
    pass


class FacilityUpdate(BaseModel):
    name: Optional[str] = None
    facility_type: Optional[str] = None
    level: Optional[str] = None
    region: Optional[str] = None
    zone: Optional[str] = None
    wereda: Optional[str] = None
    code: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    capacity: Optional[int] = Field(None, ge=0)
    staff_count: Optional[int] = Field(None, ge=0)
    operational_status: Optional[str] = None
    services_offered: Optional[List[str]] = None


class FacilityRead(FacilityBase):
    id: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
