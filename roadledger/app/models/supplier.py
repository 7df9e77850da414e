"""
Supplier database model.

A supplier (broker / truck owner) provides market vehicles and is paid per memo.
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from roadledger.app.db.session import Base


class Supplier(Base):
    """Supplier master record."""
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    name = Column(String(200), unique=True, nullable=False, index=True)
    address = Column(String(500), nullable=True)
    contact = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    gst_number = Column(String(50), nullable=True)
    pan_number = Column(String(50), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Supplier(id={self.id}, name='{self.name}')>"
