"""
Cashbook Entry Pydantic schemas.

running_balance is computed by the server at insert time and is read-only.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime, date as date_type
from typing import Optional, List

from roadledger.app.models.enums import EntryType, CashbookCategory, PaymentMode
from roadledger.app.schemas.vehicle import normalize_vehicle_no


class CashbookEntryCreate(BaseModel):
    """Schema for recording a cash movement."""
    type: EntryType
    category: CashbookCategory
    amount: float = Field(..., ge=0)
    date: date_type
    reference_id: Optional[str] = Field(None, max_length=100)
    reference_name: Optional[str] = Field(None, max_length=200)
    narration: str = Field(..., min_length=1)
    vehicle_no: Optional[str] = Field(None, max_length=50)
    party_id: Optional[int] = None
    party_name: Optional[str] = Field(None, max_length=200)
    supplier_id: Optional[int] = None
    supplier_name: Optional[str] = Field(None, max_length=200)
    memo_id: Optional[int] = None
    bill_id: Optional[int] = None
    loading_slip_id: Optional[int] = None

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vehicle_no(v)


class CashbookEntryUpdate(BaseModel):
    """
    Schema for updating a cash movement.

    Editing does not touch any stored running balance; run the
    recomputation pass afterwards if the history must be consistent.
    """
    type: Optional[EntryType] = None
    category: Optional[CashbookCategory] = None
    amount: Optional[float] = Field(None, ge=0)
    date: Optional[date_type] = None
    reference_id: Optional[str] = Field(None, max_length=100)
    reference_name: Optional[str] = Field(None, max_length=200)
    narration: Optional[str] = Field(None, min_length=1)
    vehicle_no: Optional[str] = Field(None, max_length=50)
    party_id: Optional[int] = None
    party_name: Optional[str] = Field(None, max_length=200)
    supplier_id: Optional[int] = None
    supplier_name: Optional[str] = Field(None, max_length=200)

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vehicle_no(v)


class CashbookEntryResponse(BaseModel):
    """Schema for cashbook entry response."""
    id: int
    type: EntryType
    category: CashbookCategory
    amount: float
    date: date_type
    reference_id: Optional[str]
    reference_name: Optional[str]
    narration: str
    vehicle_no: Optional[str]
    party_id: Optional[int]
    party_name: Optional[str]
    supplier_id: Optional[int]
    supplier_name: Optional[str]
    memo_id: Optional[int]
    bill_id: Optional[int]
    loading_slip_id: Optional[int]
    payment_mode: PaymentMode
    running_balance: float
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CashbookEntryListResponse(BaseModel):
    """Schema for paginated cashbook list."""
    entries: List[CashbookEntryResponse]
    total: int
    page: int
    page_size: int


class BalanceRecomputeResponse(BaseModel):
    """Result of an explicit running-balance recomputation pass."""
    scanned: int
    updated: int
    final_balance: float
