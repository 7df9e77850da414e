"""
Party database model.

A party is a customer that is billed for transport (consignor / consignee).
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from roadledger.app.db.session import Base


class Party(Base):
    """
    Party master record.

    Bills reference a party by id; older records may only carry the name.
    """
    __tablename__ = "parties"

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
        return f"<Party(id={self.id}, name='{self.name}')>"
