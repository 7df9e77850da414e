"""
Party Commission Ledger Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime, date as date_type
from typing import Optional, List

from roadledger.app.models.enums import EntryType


class CommissionEntryCreate(BaseModel):
    """Schema for a manual commission ledger entry."""
    party_id: int
    party_name: Optional[str] = Field(None, max_length=200, description="Defaults to the party master name")
    bill_number: Optional[str] = Field(None, max_length=100)
    reference_id: Optional[str] = Field(None, max_length=100)
    date: date_type
    entry_type: EntryType
    amount: float = Field(..., gt=0)
    narration: str = Field(..., min_length=1)


class CommissionEntryUpdate(BaseModel):
    """Amounts and dates can be corrected; the party cannot change."""
    bill_number: Optional[str] = Field(None, max_length=100)
    reference_id: Optional[str] = Field(None, max_length=100)
    date: Optional[date_type] = None
    entry_type: Optional[EntryType] = None
    amount: Optional[float] = Field(None, gt=0)
    narration: Optional[str] = Field(None, min_length=1)


class CommissionEntryResponse(BaseModel):
    id: int
    party_id: int
    party_name: str
    bill_id: Optional[int]
    banking_entry_id: Optional[int]
    bill_number: Optional[str]
    reference_id: Optional[str]
    date: date_type
    entry_type: EntryType
    amount: float
    narration: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CommissionEntryListResponse(BaseModel):
    entries: List[CommissionEntryResponse]
    total: int
    page: int
    page_size: int


class CommissionSummary(BaseModel):
    """Totals for one party (or all parties when party_id is None)."""
    party_id: Optional[int] = None
    party_name: Optional[str] = None
    total_credits: float
    total_debits: float
    total_entries: int
    balance: float
