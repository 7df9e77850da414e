"""
Fuel Transaction database model.

Wallet top-ups and fuel allocations to vehicles.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from roadledger.app.db.session import Base
from roadledger.app.models.enums import FuelTransactionType, db_enum


class FuelTransaction(Base):
    """Fuel transaction model."""
    __tablename__ = "fuel_transactions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    type = Column(db_enum(FuelTransactionType), nullable=False, index=True)
    wallet_name = Column(String(200), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False, index=True)

    vehicle_no = Column(String(50), nullable=True, index=True)
    reference_id = Column(String(100), nullable=True)
    narration = Column(Text, nullable=False)

    # Allocation details
    fuel_type = Column(String(50), nullable=True, default="Diesel")
    fuel_quantity = Column(Float, nullable=True)
    rate_per_liter = Column(Float, nullable=True)
    odometer_reading = Column(Float, nullable=True)
    allocated_by = Column(String(100), nullable=True)

    # Set when the top-up came from a banking entry
    banking_entry_id = Column(Integer, ForeignKey('banking_entries.id', ondelete="SET NULL"), nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<FuelTransaction(id={self.id}, type='{self.type}', wallet='{self.wallet_name}', amount={self.amount})>"
