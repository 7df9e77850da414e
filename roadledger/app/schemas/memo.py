"""
Memo Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime, date as date_type
from typing import Optional, List

from roadledger.app.models.enums import MemoStatus
from roadledger.app.schemas.advance_payment import AdvancePaymentCreate, AdvancePaymentResponse


class MemoCreate(BaseModel):
    """Schema for creating a memo against a loading slip."""
    memo_number: str = Field(..., min_length=1, max_length=100)
    loading_slip_id: int
    date: date_type
    supplier: str = Field(..., min_length=1, max_length=200)
    supplier_id: Optional[int] = None
    freight: float = Field(..., ge=0)
    commission: float = Field(0, ge=0)
    mamool: float = Field(0, ge=0)
    detention: float = Field(0, ge=0)
    extra: float = Field(0, ge=0)
    rto: float = Field(0, ge=0)
    status: MemoStatus = MemoStatus.PENDING
    paid_date: Optional[date_type] = None
    paid_amount: Optional[float] = Field(None, ge=0)
    narration: Optional[str] = None
    advance_payments: List[AdvancePaymentCreate] = Field(default_factory=list)


class MemoUpdate(BaseModel):
    """Schema for updating a memo. The loading slip cannot be changed."""
    memo_number: Optional[str] = Field(None, min_length=1, max_length=100)
    date: Optional[date_type] = None
    supplier: Optional[str] = Field(None, min_length=1, max_length=200)
    supplier_id: Optional[int] = None
    freight: Optional[float] = Field(None, ge=0)
    commission: Optional[float] = Field(None, ge=0)
    mamool: Optional[float] = Field(None, ge=0)
    detention: Optional[float] = Field(None, ge=0)
    extra: Optional[float] = Field(None, ge=0)
    rto: Optional[float] = Field(None, ge=0)
    status: Optional[MemoStatus] = None
    paid_date: Optional[date_type] = None
    paid_amount: Optional[float] = Field(None, ge=0)
    narration: Optional[str] = None
    advance_payments: Optional[List[AdvancePaymentCreate]] = None


class MemoMarkPaid(BaseModel):
    """Schema for settling a memo."""
    paid_date: date_type
    paid_amount: Optional[float] = Field(None, ge=0, description="Defaults to the memo net amount")


class MemoResponse(BaseModel):
    """Schema for memo response."""
    id: int
    memo_number: str
    loading_slip_id: int
    date: date_type
    supplier: str
    supplier_id: Optional[int]
    freight: float
    commission: float
    mamool: float
    detention: float
    extra: float
    rto: float
    net_amount: float
    status: MemoStatus
    paid_date: Optional[date_type]
    paid_amount: Optional[float]
    narration: Optional[str]
    advance_payments: List[AdvancePaymentResponse]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MemoListResponse(BaseModel):
    """Schema for paginated memo list."""
    memos: List[MemoResponse]
    total: int
    page: int
    page_size: int
