"""
Bill database model.

Freight invoice raised on a party for one loading slip.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from roadledger.app.db.session import Base
from roadledger.app.models.enums import BillStatus, db_enum
from roadledger.app.models.advance_payment import AdvancePayment


class Bill(Base):
    """
    Bill model.

    net_amount and total_freight are derived by the bill calculator before
    every write and are never recomputed on read.
    """
    __tablename__ = "bills"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    bill_number = Column(String(100), unique=True, nullable=False, index=True)
    loading_slip_id = Column(Integer, ForeignKey('loading_slips.id'), unique=True, nullable=False)
    date = Column(Date, nullable=False, index=True)

    # Party (name is always present, id when the party master is known)
    party = Column(String(200), nullable=False)
    party_id = Column(Integer, ForeignKey('parties.id', ondelete="SET NULL"), nullable=True, index=True)
    party_name = Column(String(200), nullable=True)

    # Charges
    bill_amount = Column(Float, nullable=False)
    detention = Column(Float, nullable=False, default=0)
    extra = Column(Float, nullable=False, default=0)
    rto = Column(Float, nullable=False, default=0)

    # Deductions
    mamool = Column(Float, nullable=False, default=0)
    tds = Column(Float, nullable=False, default=0)
    penalties = Column(Float, nullable=False, default=0)
    party_commission_cut = Column(Float, nullable=False, default=0)

    # Derived
    net_amount = Column(Float, nullable=False, default=0)
    total_freight = Column(Float, nullable=False, default=0)

    # Settlement
    status = Column(db_enum(BillStatus), nullable=False, default=BillStatus.PENDING, index=True)
    received_date = Column(Date, nullable=True)
    received_amount = Column(Float, nullable=True)

    narration = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    advance_payments = relationship(
        AdvancePayment,
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=(AdvancePayment.date, AdvancePayment.id),
    )

    def __repr__(self):
        return f"<Bill(id={self.id}, number='{self.bill_number}', net={self.net_amount})>"
