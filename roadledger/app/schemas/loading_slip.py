"""
Loading Slip Pydantic schemas.

balance is derived (freight - advance) and is never accepted from the client.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime, date as date_type
from typing import Optional, List

from roadledger.app.schemas.vehicle import normalize_vehicle_no


class LoadingSlipCreate(BaseModel):
    """Schema for creating a loading slip."""
    slip_number: str = Field(..., min_length=1, max_length=100)
    date: date_type
    party: str = Field(..., min_length=1, max_length=200)
    party_id: Optional[int] = None
    supplier: Optional[str] = Field(None, max_length=200)
    supplier_id: Optional[int] = None
    vehicle_no: str = Field(..., min_length=1, max_length=50)
    from_location: str = Field(..., min_length=1, max_length=200)
    to_location: str = Field(..., min_length=1, max_length=200)
    material: Optional[str] = Field(None, max_length=200)
    dimension: Optional[str] = Field(None, max_length=100)
    weight: Optional[float] = Field(None, ge=0)
    freight: float = Field(..., ge=0)
    advance: float = Field(0, ge=0)
    rto: float = Field(0, ge=0)
    total_freight: Optional[float] = Field(None, ge=0)
    narration: Optional[str] = None

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: str) -> str:
        return normalize_vehicle_no(v)


class LoadingSlipUpdate(BaseModel):
    """Schema for updating a loading slip."""
    slip_number: Optional[str] = Field(None, min_length=1, max_length=100)
    date: Optional[date_type] = None
    party: Optional[str] = Field(None, min_length=1, max_length=200)
    party_id: Optional[int] = None
    supplier: Optional[str] = Field(None, max_length=200)
    supplier_id: Optional[int] = None
    vehicle_no: Optional[str] = Field(None, min_length=1, max_length=50)
    from_location: Optional[str] = Field(None, min_length=1, max_length=200)
    to_location: Optional[str] = Field(None, min_length=1, max_length=200)
    material: Optional[str] = Field(None, max_length=200)
    dimension: Optional[str] = Field(None, max_length=100)
    weight: Optional[float] = Field(None, ge=0)
    freight: Optional[float] = Field(None, ge=0)
    advance: Optional[float] = Field(None, ge=0)
    rto: Optional[float] = Field(None, ge=0)
    total_freight: Optional[float] = Field(None, ge=0)
    narration: Optional[str] = None

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vehicle_no(v)


class LoadingSlipResponse(BaseModel):
    """Schema for loading slip response."""
    id: int
    slip_number: str
    date: date_type
    party: str
    party_id: Optional[int]
    supplier: Optional[str]
    supplier_id: Optional[int]
    vehicle_no: str
    from_location: str
    to_location: str
    material: Optional[str]
    dimension: Optional[str]
    weight: Optional[float]
    freight: float
    advance: float
    balance: float
    rto: float
    total_freight: Optional[float]
    narration: Optional[str]
    memo_number: Optional[str] = None
    bill_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LoadingSlipListResponse(BaseModel):
    """Schema for paginated loading slip list."""
    loading_slips: List[LoadingSlipResponse]
    total: int
    page: int
    page_size: int
