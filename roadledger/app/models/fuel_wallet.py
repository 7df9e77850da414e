"""
Fuel Wallet database model.

Prepaid fuel card / pump account that fuel allocations draw from.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint
from sqlalchemy.sql import func
from roadledger.app.db.session import Base


class FuelWallet(Base):
    """Fuel wallet model. The balance can never go negative."""
    __tablename__ = "fuel_wallets"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_fuel_wallet_balance_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    name = Column(String(200), unique=True, nullable=False, index=True)
    balance = Column(Float, nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<FuelWallet(id={self.id}, name='{self.name}', balance={self.balance})>"
