"""
Vehicle Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List

from roadledger.app.models.enums import OwnershipType


def normalize_vehicle_no(v: Optional[str]) -> Optional[str]:
    """Vehicle numbers are stored trimmed and upper-cased (e.g. 'MH12AB1234')."""
    if v is None:
        return v
    v = v.strip().upper()
    return v or None


class VehicleCreate(BaseModel):
    """Schema for registering a vehicle."""
    vehicle_no: str = Field(..., min_length=1, max_length=50)
    vehicle_type: str = Field("Truck", max_length=50)
    ownership_type: OwnershipType = OwnershipType.MARKET
    owner_name: Optional[str] = Field(None, max_length=200)
    driver_name: Optional[str] = Field(None, max_length=200)
    driver_phone: Optional[str] = Field(None, max_length=50)
    capacity: Optional[str] = Field(None, max_length=50)
    model: Optional[str] = Field(None, max_length=100)
    year: Optional[int] = Field(None, ge=1950, le=2100)

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: str) -> str:
        v = normalize_vehicle_no(v)
        if not v:
            raise ValueError("vehicle_no must not be blank")
        return v


class VehicleUpdate(BaseModel):
    """Schema for updating a vehicle."""
    vehicle_no: Optional[str] = Field(None, min_length=1, max_length=50)
    vehicle_type: Optional[str] = Field(None, max_length=50)
    ownership_type: Optional[OwnershipType] = None
    owner_name: Optional[str] = Field(None, max_length=200)
    driver_name: Optional[str] = Field(None, max_length=200)
    driver_phone: Optional[str] = Field(None, max_length=50)
    capacity: Optional[str] = Field(None, max_length=50)
    model: Optional[str] = Field(None, max_length=100)
    year: Optional[int] = Field(None, ge=1950, le=2100)

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vehicle_no(v)


class VehicleResponse(BaseModel):
    """Schema for vehicle response."""
    id: int
    vehicle_no: str
    vehicle_type: str
    ownership_type: OwnershipType
    owner_name: Optional[str]
    driver_name: Optional[str]
    driver_phone: Optional[str]
    capacity: Optional[str]
    model: Optional[str]
    year: Optional[int]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VehicleListResponse(BaseModel):
    """Schema for paginated vehicle list."""
    vehicles: List[VehicleResponse]
    total: int
    page: int
    page_size: int
