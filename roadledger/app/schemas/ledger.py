"""
Ledger Pydantic schemas.

Covers manual ledger entries, per-name summaries and scope snapshots.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime, date as date_type
from typing import Optional, List

from roadledger.app.models.enums import LedgerType, SourceType, TransactionKind
from roadledger.app.domain.ledger.snapshot import ScopeType
from roadledger.app.schemas.vehicle import normalize_vehicle_no


class LedgerEntryCreate(BaseModel):
    """
    Schema for a manual ledger entry.

    Exactly one of debit / credit should be positive. The balance is always
    computed by the server from the latest entry of the same scope.
    """
    reference_id: str = Field(..., min_length=1, max_length=100)
    reference_name: Optional[str] = Field(None, max_length=200)
    ledger_type: LedgerType = LedgerType.GENERAL
    transaction_kind: TransactionKind = TransactionKind.PAYMENT
    vehicle_no: Optional[str] = Field(None, max_length=50)
    party_id: Optional[int] = None
    supplier_id: Optional[int] = None
    description: str = Field(..., min_length=1)
    memo_number: Optional[str] = Field(None, max_length=100)
    debit: float = Field(0, ge=0)
    credit: float = Field(0, ge=0)
    date: date_type

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vehicle_no(v)

    @model_validator(mode="after")
    def check_amounts(self):
        if self.debit == 0 and self.credit == 0:
            raise ValueError("either debit or credit must be positive")
        return self


class LedgerEntryUpdate(BaseModel):
    """Only descriptive fields can change; amounts are fixed once posted."""
    reference_name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    memo_number: Optional[str] = Field(None, max_length=100)


class LedgerEntryResponse(BaseModel):
    id: int
    reference_id: str
    reference_name: Optional[str]
    ledger_type: LedgerType
    source_type: Optional[SourceType]
    source_id: Optional[int]
    transaction_kind: TransactionKind
    vehicle_no: Optional[str]
    party_id: Optional[int]
    supplier_id: Optional[int]
    scope_key: str
    description: str
    memo_number: Optional[str]
    debit: float
    credit: float
    balance: float
    date: date_type
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LedgerEntryListResponse(BaseModel):
    entries: List[LedgerEntryResponse]
    total: int
    page: int
    page_size: int


class LedgerSummaryResponse(BaseModel):
    """Totals for every entry carrying one reference_name."""
    reference_name: str
    total_debit: float
    total_credit: float
    balance: float
    entry_count: int
    entries: List[LedgerEntryResponse]


class LedgerRowResponse(BaseModel):
    date: date_type
    reference: Optional[str]
    description: str
    credit: float
    debit_payment: float
    debit_advance: float
    running_balance: float
    remarks: Optional[str] = None

    class Config:
        from_attributes = True


class LedgerTotalsResponse(BaseModel):
    credit: float
    debit_payment: float
    debit_advance: float
    current_balance: float

    class Config:
        from_attributes = True


class LedgerSnapshotResponse(BaseModel):
    """Report-ready ledger for one scope and an optional inclusive date range."""
    scope_type: ScopeType
    scope_key: str
    title: str
    date_from: Optional[date_type]
    date_to: Optional[date_type]
    rows: List[LedgerRowResponse]
    totals: LedgerTotalsResponse

    class Config:
        from_attributes = True


class BalanceBreak(BaseModel):
    scope_key: str
    entry_id: int
    stored_balance: float
    expected_balance: float


class LedgerRecomputeResponse(BaseModel):
    scopes: int
    scanned: int
    updated: int
