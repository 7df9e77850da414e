"""
Enumerations shared by the back-office models.

Values are the lower-case strings used on the wire and in the database.
"""

import enum

from sqlalchemy import Enum


def db_enum(enum_cls: type[enum.Enum]) -> Enum:
    """Portable column type that stores enum values rather than member names."""
    return Enum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        validate_strings=True,
        length=32,
    )


class OwnershipType(str, enum.Enum):
    """Who operates the vehicle."""
    OWN = "own"  # Company truck - memo income goes to the vehicle ledger
    MARKET = "market"  # Hired truck - memo amount is payable to the supplier


class BillStatus(str, enum.Enum):
    PENDING = "pending"
    RECEIVED = "received"


class MemoStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"


class AdvanceMode(str, enum.Enum):
    CASH = "cash"
    BANK = "bank"
    OTHER = "other"


class EntryType(str, enum.Enum):
    """Direction of a money movement."""
    DEBIT = "debit"  # Money leaving the account
    CREDIT = "credit"  # Money entering the account


class LedgerType(str, enum.Enum):
    GENERAL = "general"
    PARTY = "party"
    SUPPLIER = "supplier"
    VEHICLE = "vehicle"
    VEHICLE_INCOME = "vehicle_income"
    VEHICLE_EXPENSE = "vehicle_expense"
    COMMISSION = "commission"


class SourceType(str, enum.Enum):
    """Collection a ledger entry was posted from."""
    MEMO = "memo"
    BILL = "bill"
    BANKING = "banking"
    CASHBOOK = "cashbook"
    FUEL = "fuel"


class TransactionKind(str, enum.Enum):
    MEMO = "memo"
    PAYMENT = "payment"
    BILL = "bill"
    EXPENSE = "expense"
    COMMISSION = "commission"
    PARTY = "party"


class BankingCategory(str, enum.Enum):
    BILL_ADVANCE = "bill_advance"
    BILL_PAYMENT = "bill_payment"
    MEMO_ADVANCE = "memo_advance"
    MEMO_PAYMENT = "memo_payment"
    EXPENSE = "expense"
    FUEL_WALLET = "fuel_wallet"
    FUEL_WALLET_CREDIT = "fuel_wallet_credit"
    VEHICLE_EXPENSE = "vehicle_expense"
    VEHICLE_CREDIT_NOTE = "vehicle_credit_note"
    PARTY_PAYMENT = "party_payment"
    PARTY_ON_ACCOUNT = "party_on_account"
    PARTY_COMMISSION = "party_commission"
    SUPPLIER_PAYMENT = "supplier_payment"
    OTHER = "other"


class CashbookCategory(str, enum.Enum):
    VEHICLE_EXPENSE = "vehicle_expense"
    OFFICE_EXPENSE = "office_expense"
    FUEL_EXPENSE = "fuel_expense"
    MAINTENANCE = "maintenance"
    SALARY = "salary"
    PARTY_ON_ACCOUNT = "party_on_account"
    PARTY_COMMISSION = "party_commission"
    SUPPLIER_PAYMENT = "supplier_payment"
    BILL_ADVANCE = "bill_advance"
    BILL_PAYMENT = "bill_payment"
    MEMO_ADVANCE = "memo_advance"
    MEMO_PAYMENT = "memo_payment"
    PARTY_PAYMENT = "party_payment"
    OTHER = "other"


class PaymentMode(str, enum.Enum):
    CASH = "cash"
    BANK = "bank"
    CHEQUE = "cheque"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"


class FuelTransactionType(str, enum.Enum):
    WALLET_CREDIT = "wallet_credit"
    FUEL_ALLOCATION = "fuel_allocation"
