"""
Cashbook Entry database model.

Cash movements with a running balance captured once, at insert time.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, Index
from sqlalchemy.sql import func
from roadledger.app.db.session import Base
from roadledger.app.models.enums import EntryType, CashbookCategory, PaymentMode, db_enum


class CashbookEntry(Base):
    """
    Cashbook entry model.

    running_balance is the balance of the latest entry (date desc,
    created_at desc) at the moment this row was inserted, plus or minus
    amount. It is a snapshot: back-dated inserts, edits and deletes do not
    touch it. Use the explicit recomputation pass to rebuild the column.
    """
    __tablename__ = "cashbook_entries"
    __table_args__ = (
        Index("ix_cashbook_date_created", "date", "created_at"),
        Index("ix_cashbook_category_date", "category", "date"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    type = Column(db_enum(EntryType), nullable=False)
    category = Column(db_enum(CashbookCategory), nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False, index=True)

    reference_id = Column(String(100), nullable=True, index=True)
    reference_name = Column(String(200), nullable=True, index=True)
    narration = Column(Text, nullable=False)
    vehicle_no = Column(String(50), nullable=True, index=True)

    # Optional traceability links
    party_id = Column(Integer, ForeignKey('parties.id', ondelete="SET NULL"), nullable=True, index=True)
    party_name = Column(String(200), nullable=True)
    supplier_id = Column(Integer, ForeignKey('suppliers.id', ondelete="SET NULL"), nullable=True, index=True)
    supplier_name = Column(String(200), nullable=True)
    memo_id = Column(Integer, ForeignKey('memos.id', ondelete="SET NULL"), nullable=True)
    bill_id = Column(Integer, ForeignKey('bills.id', ondelete="SET NULL"), nullable=True)
    loading_slip_id = Column(Integer, ForeignKey('loading_slips.id', ondelete="SET NULL"), nullable=True)

    payment_mode = Column(db_enum(PaymentMode), nullable=False, default=PaymentMode.CASH)

    running_balance = Column(Float, nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<CashbookEntry(id={self.id}, type='{self.type}', amount={self.amount}, balance={self.running_balance})>"
