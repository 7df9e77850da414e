"""
POD File database model.

Proof-of-delivery scans attached to bills, stored inline as base64.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from roadledger.app.db.session import Base


class PODFile(Base):
    """Proof-of-delivery file."""
    __tablename__ = "pod_files"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    filename = Column(String(255), nullable=False)
    file_data = Column(Text, nullable=False)  # base64
    file_type = Column(String(100), nullable=False)

    bill_number = Column(String(100), nullable=True, index=True)
    vehicle_no = Column(String(50), nullable=True, index=True)
    party = Column(String(200), nullable=True)

    upload_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<PODFile(id={self.id}, filename='{self.filename}', bill='{self.bill_number}')>"
