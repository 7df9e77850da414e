"""
Banking Entry Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime, date as date_type
from typing import Optional, List

from roadledger.app.models.enums import EntryType, BankingCategory, PaymentMode
from roadledger.app.schemas.vehicle import normalize_vehicle_no


class BankingEntryCreate(BaseModel):
    """Schema for recording a bank movement."""
    type: EntryType
    category: BankingCategory
    amount: float = Field(..., gt=0)
    date: date_type
    reference_id: Optional[str] = Field(None, max_length=100, description="Bill / memo number")
    reference_name: Optional[str] = Field(None, max_length=200, description="Party, supplier or wallet name")
    narration: str = Field(..., min_length=1)
    vehicle_no: Optional[str] = Field(None, max_length=50)
    bank_account: Optional[str] = Field(None, max_length=100)
    payment_mode: PaymentMode = PaymentMode.BANK
    party_id: Optional[int] = None
    supplier_id: Optional[int] = None
    bill_id: Optional[int] = None
    memo_id: Optional[int] = None

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vehicle_no(v)


class BankingEntryUpdate(BaseModel):
    """Schema for updating a bank movement."""
    type: Optional[EntryType] = None
    category: Optional[BankingCategory] = None
    amount: Optional[float] = Field(None, gt=0)
    date: Optional[date_type] = None
    reference_id: Optional[str] = Field(None, max_length=100)
    reference_name: Optional[str] = Field(None, max_length=200)
    narration: Optional[str] = Field(None, min_length=1)
    vehicle_no: Optional[str] = Field(None, max_length=50)
    bank_account: Optional[str] = Field(None, max_length=100)
    payment_mode: Optional[PaymentMode] = None
    party_id: Optional[int] = None
    supplier_id: Optional[int] = None
    bill_id: Optional[int] = None
    memo_id: Optional[int] = None

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vehicle_no(v)


class BankingEntryResponse(BaseModel):
    """Schema for banking entry response."""
    id: int
    type: EntryType
    category: BankingCategory
    amount: float
    date: date_type
    reference_id: Optional[str]
    reference_name: Optional[str]
    narration: str
    vehicle_no: Optional[str]
    bank_account: Optional[str]
    payment_mode: PaymentMode
    party_id: Optional[int]
    supplier_id: Optional[int]
    bill_id: Optional[int]
    memo_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BankingEntryListResponse(BaseModel):
    """Schema for paginated banking list."""
    entries: List[BankingEntryResponse]
    total: int
    page: int
    page_size: int
