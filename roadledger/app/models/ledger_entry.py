"""
Ledger Entry database model.

Journal rows posted from memos, banking, cashbook and fuel allocations.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, Index
from sqlalchemy.sql import func
from roadledger.app.db.session import Base
from roadledger.app.models.enums import LedgerType, SourceType, TransactionKind, db_enum


class LedgerEntry(Base):
    """
    Ledger Entry model.

    balance is the running total of the entry's scope (see scope_key) right
    after this entry was posted. Normally exactly one of debit / credit is
    non-zero. (source_type, source_id) identify the posting record so the
    entries can be withdrawn when the source changes.
    """
    __tablename__ = "ledger_entries"
    __table_args__ = (
        Index("ix_ledger_scope_date", "scope_key", "date"),
        Index("ix_ledger_source", "source_type", "source_id"),
        Index("ix_ledger_vehicle_date", "vehicle_no", "date"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    reference_id = Column(String(100), nullable=False, index=True)
    reference_name = Column(String(200), nullable=True, index=True)

    ledger_type = Column(db_enum(LedgerType), nullable=False, default=LedgerType.GENERAL, index=True)
    source_type = Column(db_enum(SourceType), nullable=True)
    source_id = Column(Integer, nullable=True)
    transaction_kind = Column(db_enum(TransactionKind), nullable=False)

    # Scope links (weak, lookup only)
    vehicle_no = Column(String(50), nullable=True)
    party_id = Column(Integer, ForeignKey('parties.id', ondelete="SET NULL"), nullable=True, index=True)
    supplier_id = Column(Integer, ForeignKey('suppliers.id', ondelete="SET NULL"), nullable=True, index=True)
    scope_key = Column(String(120), nullable=False)

    description = Column(Text, nullable=False)
    memo_number = Column(String(100), nullable=True)

    debit = Column(Float, nullable=False, default=0)
    credit = Column(Float, nullable=False, default=0)
    balance = Column(Float, nullable=False)

    date = Column(Date, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return (
            f"<LedgerEntry(id={self.id}, scope='{self.scope_key}', "
            f"debit={self.debit}, credit={self.credit}, balance={self.balance})>"
        )
