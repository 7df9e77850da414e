"""
Party and Supplier Pydantic schemas.

Parties are the consignors we bill; suppliers own the market vehicles we hire.
Both masters share the same shape.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List


class _ContactFields(BaseModel):
    address: Optional[str] = Field(None, max_length=500)
    contact: Optional[str] = Field(None, max_length=200, description="Contact person")
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    gst_number: Optional[str] = Field(None, max_length=50)
    pan_number: Optional[str] = Field(None, max_length=50)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip().lower() or None


class PartyCreate(_ContactFields):
    """Schema for creating a party."""
    name: str = Field(..., min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class PartyUpdate(_ContactFields):
    """Schema for updating a party. All fields optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class PartyResponse(BaseModel):
    """Schema for party response."""
    id: int
    name: str
    address: Optional[str]
    contact: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    gst_number: Optional[str]
    pan_number: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PartyListResponse(BaseModel):
    """Schema for paginated party list."""
    parties: List[PartyResponse]
    total: int
    page: int
    page_size: int


class SupplierCreate(PartyCreate):
    """Schema for creating a supplier."""


class SupplierUpdate(PartyUpdate):
    """Schema for updating a supplier."""


class SupplierResponse(PartyResponse):
    """Schema for supplier response."""


class SupplierListResponse(BaseModel):
    """Schema for paginated supplier list."""
    suppliers: List[SupplierResponse]
    total: int
    page: int
    page_size: int
