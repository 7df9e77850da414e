"""
Party Commission Ledger database model.

Commission cut withheld from a party on a bill (credit) and paid out later (debit).
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, Index
from sqlalchemy.sql import func
from roadledger.app.db.session import Base
from roadledger.app.models.enums import EntryType, db_enum


class PartyCommissionLedger(Base):
    """Party commission ledger entry."""
    __tablename__ = "party_commission_ledger"
    __table_args__ = (
        Index("ix_commission_party_date", "party_id", "date"),
        Index("ix_commission_party_bill", "party_id", "bill_number"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    party_id = Column(Integer, ForeignKey('parties.id', ondelete="CASCADE"), nullable=False)
    party_name = Column(String(200), nullable=False)

    bill_id = Column(Integer, ForeignKey('bills.id', ondelete="CASCADE"), nullable=True, index=True)
    banking_entry_id = Column(Integer, ForeignKey('banking_entries.id', ondelete="CASCADE"), nullable=True, index=True)
    bill_number = Column(String(100), nullable=True, index=True)
    reference_id = Column(String(100), nullable=True)

    date = Column(Date, nullable=False, index=True)
    entry_type = Column(db_enum(EntryType), nullable=False)
    amount = Column(Float, nullable=False)
    narration = Column(Text, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<PartyCommissionLedger(id={self.id}, party='{self.party_name}', {self.entry_type}={self.amount})>"
