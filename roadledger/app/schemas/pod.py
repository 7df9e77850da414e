"""
POD file Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List

from roadledger.app.schemas.vehicle import normalize_vehicle_no


class PODFileCreate(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    file_data: str = Field(..., min_length=1, description="Base64 encoded file content")
    file_type: str = Field(..., min_length=1, max_length=100)
    bill_number: Optional[str] = Field(None, max_length=100)
    vehicle_no: Optional[str] = Field(None, max_length=50)
    party: Optional[str] = Field(None, max_length=200)

    @field_validator("vehicle_no")
    @classmethod
    def clean_vehicle_no(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vehicle_no(v)


class PODFileUpdate(BaseModel):
    filename: Optional[str] = Field(None, min_length=1, max_length=255)
    bill_number: Optional[str] = Field(None, max_length=100)
    vehicle_no: Optional[str] = Field(None, max_length=50)
    party: Optional[str] = Field(None, max_length=200)


class PODFileMeta(BaseModel):
    """List view without the file payload."""
    id: int
    filename: str
    file_type: str
    bill_number: Optional[str]
    vehicle_no: Optional[str]
    party: Optional[str]
    upload_date: datetime
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PODFileResponse(PODFileMeta):
    file_data: str


class PODFileListResponse(BaseModel):
    files: List[PODFileMeta]
    total: int
    page: int
    page_size: int
