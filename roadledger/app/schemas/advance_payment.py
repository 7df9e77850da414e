"""
Advance Payment Pydantic schemas (embedded in bills and memos).
"""

from pydantic import BaseModel, Field
from datetime import datetime, date as date_type
from typing import Optional

from roadledger.app.models.enums import AdvanceMode


class AdvancePaymentCreate(BaseModel):
    """A dated partial payment recorded before final settlement."""
    date: date_type
    amount: float = Field(..., gt=0)
    mode: AdvanceMode = AdvanceMode.CASH
    reference: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class AdvancePaymentResponse(BaseModel):
    id: int
    date: date_type
    amount: float
    mode: AdvanceMode
    reference: Optional[str]
    description: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
