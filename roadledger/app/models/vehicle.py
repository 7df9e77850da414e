"""
Vehicle database model.

Own vehicles earn memo income into their vehicle ledger; market vehicles
are hired through suppliers.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func
from roadledger.app.db.session import Base
from roadledger.app.models.enums import OwnershipType, db_enum


class Vehicle(Base):
    """
    Vehicle model.

    vehicle_no is stored upper-cased and is the key used by every
    vehicle-scoped ledger entry.
    """
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Vehicle identification
    vehicle_no = Column(String(50), unique=True, nullable=False, index=True)
    vehicle_type = Column(String(100), nullable=False, default="Truck")
    ownership_type = Column(db_enum(OwnershipType), nullable=False, default=OwnershipType.MARKET, index=True)

    # Owner / driver details
    owner_name = Column(String(200), nullable=True)
    driver_name = Column(String(200), nullable=True)
    driver_phone = Column(String(50), nullable=True)

    capacity = Column(Float, nullable=True)
    model = Column(String(100), nullable=True)
    year = Column(Integer, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, vehicle_no='{self.vehicle_no}', ownership='{self.ownership_type}')>"
