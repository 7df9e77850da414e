"""
Advance Payment database model.

A dated partial payment recorded against a bill or a memo before settlement.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from roadledger.app.db.session import Base
from roadledger.app.models.enums import AdvanceMode, db_enum


class AdvancePayment(Base):
    """
    Advance payment owned by exactly one bill or one memo.
    """
    __tablename__ = "advance_payments"
    __table_args__ = (
        CheckConstraint(
            "(bill_id IS NULL) <> (memo_id IS NULL)",
            name="ck_advance_payment_single_owner",
        ),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    bill_id = Column(Integer, ForeignKey('bills.id', ondelete="CASCADE"), nullable=True, index=True)
    memo_id = Column(Integer, ForeignKey('memos.id', ondelete="CASCADE"), nullable=True, index=True)

    date = Column(Date, nullable=False)
    amount = Column(Float, nullable=False)
    mode = Column(db_enum(AdvanceMode), nullable=False, default=AdvanceMode.CASH)
    reference = Column(String(200), nullable=True)
    description = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        owner = f"bill_id={self.bill_id}" if self.bill_id else f"memo_id={self.memo_id}"
        return f"<AdvancePayment(id={self.id}, {owner}, amount={self.amount})>"
