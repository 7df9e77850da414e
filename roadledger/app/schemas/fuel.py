"""
Fuel wallet and fuel transaction Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime, date as date_type
from typing import Optional, List

from roadledger.app.models.enums import FuelTransactionType
from roadledger.app.schemas.vehicle import normalize_vehicle_no


class FuelWalletCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    balance: float = Field(0, ge=0)


class FuelWalletResponse(BaseModel):
    id: int
    name: str
    balance: float
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FuelWalletListResponse(BaseModel):
    wallets: List[FuelWalletResponse]
    total: int
    page: int
    page_size: int


class FuelTransactionCreate(BaseModel):
    """
    Schema for a wallet top-up or a fuel allocation.

    A wallet_credit creates the wallet when it does not exist yet.
    """
    type: FuelTransactionType
    wallet_name: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., gt=0)
    date: date_type
    vehicle_no: Optional[str] = Field(None, max_length=50)
    reference_id: Optional[str] = Field(None, max_length=100)
    narration: str = Field(..., min_length=1)
    fuel_type: Optional[str] = Field("Diesel", max_length=50)
    fuel_quantity: Optional[float] = Field(None, ge=0)
    rate_per_liter: Optional[float] = Field(None, ge=0)
    odometer_reading: Optional[float] = Field(None, ge=0)
    allocated_by: Optional[str] = Field(None, max_length=100)

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vehicle_no(v)


class FuelAllocationCreate(BaseModel):
    """Schema for allocating fuel from an existing wallet to a vehicle."""
    wallet_name: str = Field(..., min_length=1, max_length=200)
    vehicle_no: str = Field(..., min_length=1, max_length=50)
    amount: float = Field(..., gt=0)
    date: date_type
    narration: Optional[str] = None
    fuel_type: Optional[str] = Field("Diesel", max_length=50)
    fuel_quantity: Optional[float] = Field(None, ge=0)
    rate_per_liter: Optional[float] = Field(None, ge=0)
    odometer_reading: Optional[float] = Field(None, ge=0)
    allocated_by: Optional[str] = Field(None, max_length=100)

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: str) -> str:
        return normalize_vehicle_no(v)


class FuelTransactionUpdate(BaseModel):
    """Descriptive fields only; amount, wallet and type are fixed once recorded."""
    reference_id: Optional[str] = Field(None, max_length=100)
    narration: Optional[str] = Field(None, min_length=1)
    fuel_type: Optional[str] = Field(None, max_length=50)
    fuel_quantity: Optional[float] = Field(None, ge=0)
    rate_per_liter: Optional[float] = Field(None, ge=0)
    odometer_reading: Optional[float] = Field(None, ge=0)
    allocated_by: Optional[str] = Field(None, max_length=100)


class FuelTransactionResponse(BaseModel):
    id: int
    type: FuelTransactionType
    wallet_name: str
    amount: float
    date: date_type
    vehicle_no: Optional[str]
    reference_id: Optional[str]
    narration: str
    fuel_type: Optional[str]
    fuel_quantity: Optional[float]
    rate_per_liter: Optional[float]
    odometer_reading: Optional[float]
    allocated_by: Optional[str]
    banking_entry_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FuelTransactionListResponse(BaseModel):
    transactions: List[FuelTransactionResponse]
    total: int
    page: int
    page_size: int


class FuelAllocationResponse(BaseModel):
    """Allocation result with the wallet balance left after the debit."""
    transaction: FuelTransactionResponse
    wallet: FuelWalletResponse
