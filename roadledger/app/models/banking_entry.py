"""
Banking Entry database model.

Every bank (or cash-mode bank book) movement. Each entry posts one ledger entry.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from roadledger.app.db.session import Base
from roadledger.app.models.enums import EntryType, BankingCategory, PaymentMode, db_enum


class BankingEntry(Base):
    """Banking entry model."""
    __tablename__ = "banking_entries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    type = Column(db_enum(EntryType), nullable=False, index=True)
    category = Column(db_enum(BankingCategory), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False, index=True)

    # Free-form references (bill / memo number, wallet or party name)
    reference_id = Column(String(100), nullable=True, index=True)
    reference_name = Column(String(200), nullable=True, index=True)
    narration = Column(Text, nullable=False)

    vehicle_no = Column(String(50), nullable=True, index=True)
    bank_account = Column(String(100), nullable=True)
    payment_mode = Column(db_enum(PaymentMode), nullable=False, default=PaymentMode.BANK)

    # Traceability links
    party_id = Column(Integer, ForeignKey('parties.id', ondelete="SET NULL"), nullable=True, index=True)
    supplier_id = Column(Integer, ForeignKey('suppliers.id', ondelete="SET NULL"), nullable=True, index=True)
    bill_id = Column(Integer, ForeignKey('bills.id', ondelete="SET NULL"), nullable=True, index=True)
    memo_id = Column(Integer, ForeignKey('memos.id', ondelete="SET NULL"), nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<BankingEntry(id={self.id}, type='{self.type}', category='{self.category}', amount={self.amount})>"
