"""
Ledger posting rules.

Maps source documents (memos, banking and cashbook entries, fuel
allocations) to the ledger entries they post. Pure: the caller resolves the
vehicle ownership and party lookups and writes the postings through the
balance writer.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional

from roadledger.app.domain.calculators import memo_freight_after_deductions, memo_net_amount
from roadledger.app.models.enums import (
    BankingCategory,
    CashbookCategory,
    EntryType,
    LedgerType,
    TransactionKind,
)


def scope_key_for(
    ledger_type: LedgerType,
    vehicle_no: Optional[str] = None,
    party_id: Optional[int] = None,
    supplier_id: Optional[int] = None,
) -> str:
    """
    Balance scope of a ledger entry.

    Vehicle first, then party, then supplier, else the ledger type itself.
    """
    if vehicle_no:
        return f"vehicle:{vehicle_no}"
    if party_id is not None:
        return f"party:{party_id}"
    if supplier_id is not None:
        return f"supplier:{supplier_id}"
    return LedgerType(ledger_type).value


@dataclass(frozen=True)
class LedgerPosting:
    ledger_type: LedgerType
    transaction_kind: TransactionKind
    reference_id: str
    description: str
    date: date
    debit: float = 0.0
    credit: float = 0.0
    reference_name: Optional[str] = None
    vehicle_no: Optional[str] = None
    party_id: Optional[int] = None
    supplier_id: Optional[int] = None
    memo_number: Optional[str] = None

    @property
    def scope_key(self) -> str:
        return scope_key_for(self.ledger_type, self.vehicle_no, self.party_id, self.supplier_id)


def memo_postings(memo: Any, vehicle_no: Optional[str], own_vehicle: bool) -> List[LedgerPosting]:
    """
    Own vehicles earn the freight (after commission and mamool) plus detention
    and extra as separate vehicle income credits. For market vehicles the
    whole net amount is payable to the supplier.
    """
    reference_id = memo.memo_number
    if own_vehicle:
        common = dict(
            ledger_type=LedgerType.VEHICLE_INCOME,
            transaction_kind=TransactionKind.MEMO,
            reference_id=reference_id,
            reference_name=vehicle_no,
            vehicle_no=vehicle_no,
            date=memo.date,
            memo_number=memo.memo_number,
        )
        postings = [LedgerPosting(
            description="Freight after deductions",
            credit=memo_freight_after_deductions(memo.freight, memo.commission, memo.mamool),
            **common,
        )]
        if memo.detention and memo.detention > 0:
            postings.append(LedgerPosting(description="Detention charges", credit=memo.detention, **common))
        if memo.extra and memo.extra > 0:
            postings.append(LedgerPosting(description="Extra charges", credit=memo.extra, **common))
        return postings

    return [LedgerPosting(
        ledger_type=LedgerType.SUPPLIER,
        transaction_kind=TransactionKind.MEMO,
        reference_id=reference_id,
        reference_name=memo.supplier,
        supplier_id=memo.supplier_id,
        description=f"Market vehicle memo {memo.memo_number} - Amount payable",
        credit=memo_net_amount(memo.freight, memo.commission, memo.mamool, memo.detention, memo.extra),
        date=memo.date,
        memo_number=memo.memo_number,
    )]


_BANKING_LEDGER_TYPES = {
    BankingCategory.PARTY_COMMISSION: LedgerType.COMMISSION,
    BankingCategory.VEHICLE_EXPENSE: LedgerType.VEHICLE_EXPENSE,
    BankingCategory.PARTY_ON_ACCOUNT: LedgerType.PARTY,
}


def banking_ledger_type(category: BankingCategory) -> LedgerType:
    return _BANKING_LEDGER_TYPES.get(BankingCategory(category), LedgerType.GENERAL)


def banking_postings(entry: Any, party_id: Optional[int] = None) -> List[LedgerPosting]:
    """
    Exactly one ledger entry per banking entry.

    Args:
        entry: Banking entry (ORM row or any object with the same fields)
        party_id: Party resolved for on-account payments when the entry has none
    """
    category = BankingCategory(entry.category)
    ledger_type = banking_ledger_type(category)
    is_debit = EntryType(entry.type) == EntryType.DEBIT
    reference_id = entry.reference_id or f"BANK-{entry.id}"

    if category == BankingCategory.PARTY_ON_ACCOUNT:
        return [LedgerPosting(
            ledger_type=ledger_type,
            transaction_kind=TransactionKind.PARTY,
            reference_id=reference_id,
            reference_name=entry.reference_name,
            party_id=entry.party_id if entry.party_id is not None else party_id,
            description="On Account Payment – Bank Transfer",
            credit=entry.amount,
            date=entry.date,
        )]

    if ledger_type == LedgerType.COMMISSION:
        kind = TransactionKind.COMMISSION
    else:
        kind = TransactionKind.EXPENSE if is_debit else TransactionKind.PAYMENT

    return [LedgerPosting(
        ledger_type=ledger_type,
        transaction_kind=kind,
        reference_id=reference_id,
        reference_name=entry.reference_name,
        vehicle_no=entry.vehicle_no if ledger_type == LedgerType.VEHICLE_EXPENSE else None,
        description=entry.narration,
        debit=entry.amount if is_debit else 0.0,
        credit=0.0 if is_debit else entry.amount,
        date=entry.date,
    )]


def cashbook_postings(entry: Any) -> List[LedgerPosting]:
    """Only vehicle expenses paid in cash reach the ledger."""
    if CashbookCategory(entry.category) != CashbookCategory.VEHICLE_EXPENSE or not entry.vehicle_no:
        return []
    is_debit = EntryType(entry.type) == EntryType.DEBIT
    return [LedgerPosting(
        ledger_type=LedgerType.VEHICLE_EXPENSE,
        transaction_kind=TransactionKind.EXPENSE,
        reference_id=entry.reference_id or f"CASH-{entry.id}",
        reference_name=entry.vehicle_no,
        vehicle_no=entry.vehicle_no,
        description=entry.narration,
        debit=entry.amount if is_debit else 0.0,
        credit=0.0 if is_debit else entry.amount,
        date=entry.date,
    )]


def fuel_allocation_postings(transaction: Any) -> List[LedgerPosting]:
    if not transaction.vehicle_no:
        return []
    return [LedgerPosting(
        ledger_type=LedgerType.VEHICLE_EXPENSE,
        transaction_kind=TransactionKind.EXPENSE,
        reference_id=transaction.reference_id or f"FUEL-{transaction.id}",
        reference_name=transaction.vehicle_no,
        vehicle_no=transaction.vehicle_no,
        description=f"Fuel - {transaction.wallet_name}: {transaction.narration}",
        debit=transaction.amount,
        date=transaction.date,
    )]
