"""
Loading Slip database model.

The trip record every bill and memo hangs off.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from roadledger.app.db.session import Base


class LoadingSlip(Base):
    """
    Loading Slip model.

    balance is derived (freight - advance) and stored at write time.
    Once a bill or memo references the slip its money fields are frozen.
    """
    __tablename__ = "loading_slips"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    slip_number = Column(String(100), unique=True, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    # Trip parties
    party = Column(String(200), nullable=False)
    party_id = Column(Integer, ForeignKey('parties.id', ondelete="SET NULL"), nullable=True, index=True)
    supplier = Column(String(200), nullable=False)
    supplier_id = Column(Integer, ForeignKey('suppliers.id', ondelete="SET NULL"), nullable=True, index=True)
    vehicle_no = Column(String(50), nullable=False, index=True)

    # Route and load
    from_location = Column(String(200), nullable=False)
    to_location = Column(String(200), nullable=False)
    material = Column(String(200), nullable=True)
    dimension = Column(String(100), nullable=True)
    weight = Column(Float, nullable=False)

    # Financials
    freight = Column(Float, nullable=False)
    advance = Column(Float, nullable=False, default=0)
    balance = Column(Float, nullable=False, default=0)
    rto = Column(Float, nullable=False, default=0)
    total_freight = Column(Float, nullable=False)

    narration = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<LoadingSlip(id={self.id}, number='{self.slip_number}', vehicle='{self.vehicle_no}')>"
