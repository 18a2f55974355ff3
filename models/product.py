# models/product.py

from typing import Dict, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator


class ProductBase(BaseModel):
    product_name: str = Field(..., min_length=1)
    facility: str
    product_category: Optional[str] = None
    procurement_source: Optional[str] = None
    unit: Optional[str] = None
    quantity: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    region: Optional[str] = None
    zone: Optional[str] = None
    woreda: Optional[str] = None


def _required_text(value):
    # product_name and facility are NOT NULL columns
    if value is None:
        raise ValueError("may not be null")
    value = value.strip()
    if not value:
        raise ValueError("may not be blank")
    return value


class ProductCreate(ProductBase):

    @field_validator("product_name", "facility")
    @classmethod
    def required_text(cls, v):
        return _required_text(v)


class ProductUpdate(BaseModel):
    product_name: Optional[str] = Field(None, min_length=1)
    facility: Optional[str] = Field(None, min_length=1)
    product_category: Optional[str] = None
    procurement_source: Optional[str] = None
    unit: Optional[str] = None
    quantity: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    region: Optional[str] = None
    zone: Optional[str] = None
    woreda: Optional[str] = None

    @field_validator("product_name", "facility")
    @classmethod
    def required_text(cls, v):
        # only runs when the field is sent; an explicit null is rejected
        return _required_text(v)


class ProductRead(ProductBase):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CategoryTotals(BaseModel):
    product_count: int
    total_quantity: float
    total_value: float


class ProductSummary(BaseModel):
    product_count: int
    total_quantity: float
    total_value: float
    average_price: Optional[float] = None
    by_category: Dict[str, CategoryTotals]
