"""
Bill Pydantic schemas.

net_amount and total_freight are derived at write time and only ever returned.
"""

from pydantic import BaseModel, Field
from datetime import datetime, date as date_type
from typing import Optional, List

from roadledger.app.models.enums import BillStatus
from roadledger.app.schemas.advance_payment import AdvancePaymentCreate, AdvancePaymentResponse


class BillCreate(BaseModel):
    """Schema for raising a bill against a loading slip."""
    bill_number: str = Field(..., min_length=1, max_length=100)
    loading_slip_id: int
    date: date_type
    party: str = Field(..., min_length=1, max_length=200)
    party_id: Optional[int] = None
    party_name: Optional[str] = Field(None, max_length=200)
    bill_amount: float = Field(..., ge=0)
    detention: float = Field(0, ge=0)
    extra: float = Field(0, ge=0)
    rto: float = Field(0, ge=0)
    mamool: float = Field(0, ge=0)
    tds: float = Field(0, ge=0)
    penalties: float = Field(0, ge=0)
    party_commission_cut: float = Field(0, ge=0)
    status: BillStatus = BillStatus.PENDING
    received_date: Optional[date_type] = None
    received_amount: Optional[float] = Field(None, ge=0)
    narration: Optional[str] = None
    advance_payments: List[AdvancePaymentCreate] = Field(default_factory=list)


class BillUpdate(BaseModel):
    """Schema for updating a bill. The loading slip cannot be changed."""
    bill_number: Optional[str] = Field(None, min_length=1, max_length=100)
    date: Optional[date_type] = None
    party: Optional[str] = Field(None, min_length=1, max_length=200)
    party_id: Optional[int] = None
    party_name: Optional[str] = Field(None, max_length=200)
    bill_amount: Optional[float] = Field(None, ge=0)
    detention: Optional[float] = Field(None, ge=0)
    extra: Optional[float] = Field(None, ge=0)
    rto: Optional[float] = Field(None, ge=0)
    mamool: Optional[float] = Field(None, ge=0)
    tds: Optional[float] = Field(None, ge=0)
    penalties: Optional[float] = Field(None, ge=0)
    party_commission_cut: Optional[float] = Field(None, ge=0)
    status: Optional[BillStatus] = None
    received_date: Optional[date_type] = None
    received_amount: Optional[float] = Field(None, ge=0)
    narration: Optional[str] = None
    advance_payments: Optional[List[AdvancePaymentCreate]] = None


class BillMarkReceived(BaseModel):
    """Schema for settling a bill."""
    received_date: date_type
    received_amount: Optional[float] = Field(None, ge=0, description="Defaults to the bill net amount")


class BillResponse(BaseModel):
    """Schema for bill response."""
    id: int
    bill_number: str
    loading_slip_id: int
    date: date_type
    party: str
    party_id: Optional[int]
    party_name: Optional[str]
    bill_amount: float
    detention: float
    extra: float
    rto: float
    mamool: float
    tds: float
    penalties: float
    party_commission_cut: float
    net_amount: float
    total_freight: float
    status: BillStatus
    received_date: Optional[date_type]
    received_amount: Optional[float]
    narration: Optional[str]
    advance_payments: List[AdvancePaymentResponse]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BillListResponse(BaseModel):
    """Schema for paginated bill list."""
    bills: List[BillResponse]
    total: int
    page: int
    page_size: int
