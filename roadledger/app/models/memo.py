"""
Memo database model.

Broker memo issued to the supplier (or own vehicle) that carried a loading slip.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from roadledger.app.db.session import Base
from roadledger.app.models.enums import MemoStatus, db_enum
from roadledger.app.models.advance_payment import AdvancePayment


class Memo(Base):
    """
    Memo model.

    net_amount = freight - commission - mamool + detention + extra.
    rto is recorded but deliberately not part of net_amount.
    """
    __tablename__ = "memos"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    memo_number = Column(String(100), unique=True, nullable=False, index=True)
    loading_slip_id = Column(Integer, ForeignKey('loading_slips.id'), unique=True, nullable=False)
    date = Column(Date, nullable=False, index=True)

    supplier = Column(String(200), nullable=False)
    supplier_id = Column(Integer, ForeignKey('suppliers.id', ondelete="SET NULL"), nullable=True, index=True)

    freight = Column(Float, nullable=False)
    commission = Column(Float, nullable=False, default=0)
    mamool = Column(Float, nullable=False, default=0)
    detention = Column(Float, nullable=False, default=0)
    extra = Column(Float, nullable=False, default=0)
    rto = Column(Float, nullable=False, default=0)

    net_amount = Column(Float, nullable=False, default=0)

    status = Column(db_enum(MemoStatus), nullable=False, default=MemoStatus.PENDING, index=True)
    paid_date = Column(Date, nullable=True)
    paid_amount = Column(Float, nullable=True)

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
        return f"<Memo(id={self.id}, number='{self.memo_number}', net={self.net_amount})>"
