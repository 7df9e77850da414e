"""
Ledger snapshot loaders.

Collect the movements of one scope from the collections that feed it and
hand them to the pure snapshot builder:

    party        bills (receivable), payments received, bill advances
    supplier     memos (net payable), payments made, memo advances
    vehicle      ledger entries of the vehicle
    general      ledger entries of the general scope
    fuel_wallet  wallet credits and fuel allocations
    commission   party commission ledger
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import select, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.exceptions import ResourceNotFoundError, BusinessRuleError
from roadledger.app.domain.calculators import bill_party_receivable
from roadledger.app.domain.ledger.snapshot import (
    LedgerMovement,
    LedgerSnapshot,
    ScopeType,
    build_snapshot,
    sequence_key,
)
from roadledger.app.models.banking_entry import BankingEntry
from roadledger.app.models.bill import Bill
from roadledger.app.models.cashbook_entry import CashbookEntry
from roadledger.app.models.enums import (
    BankingCategory,
    CashbookCategory,
    EntryType,
    FuelTransactionType,
)
from roadledger.app.models.fuel_transaction import FuelTransaction
from roadledger.app.models.fuel_wallet import FuelWallet
from roadledger.app.models.ledger_entry import LedgerEntry
from roadledger.app.models.memo import Memo
from roadledger.app.models.party import Party
from roadledger.app.models.party_commission_ledger import PartyCommissionLedger
from roadledger.app.models.supplier import Supplier

# Tie-break rank between sources on the same date and creation instant
RANK_DOCUMENT = 0
RANK_ADVANCE = 1
RANK_BANKING = 2
RANK_CASHBOOK = 3

PARTY_PAYMENT_BANKING = (
    BankingCategory.BILL_PAYMENT,
    BankingCategory.PARTY_PAYMENT,
    BankingCategory.PARTY_ON_ACCOUNT,
)
PARTY_PAYMENT_CASHBOOK = (
    CashbookCategory.BILL_PAYMENT,
    CashbookCategory.PARTY_PAYMENT,
    CashbookCategory.PARTY_ON_ACCOUNT,
)
SUPPLIER_PAYMENT_BANKING = (BankingCategory.MEMO_PAYMENT, BankingCategory.SUPPLIER_PAYMENT)
SUPPLIER_PAYMENT_CASHBOOK = (CashbookCategory.MEMO_PAYMENT, CashbookCategory.SUPPLIER_PAYMENT)


def _document_links(id_column, ref_column, ids: List[int], numbers: List[str]):
    clauses = []
    if ids:
        clauses.append(id_column.in_(ids))
    if numbers:
        clauses.append(ref_column.in_(numbers))
    return clauses


async def party_movements(db: AsyncSession, party: Party) -> List[LedgerMovement]:
    bills_result = await db.execute(
        select(Bill).where(or_(Bill.party_id == party.id, and_(Bill.party_id.is_(None), Bill.party == party.name)))
    )
    bills = bills_result.scalars().all()

    movements = []
    for bill in bills:
        movements.append(LedgerMovement(
            date=bill.date,
            reference=bill.bill_number,
            description=f"Bill {bill.bill_number}",
            credit=bill_party_receivable(
                bill.bill_amount, bill.detention, bill.extra, bill.rto, bill.mamool, bill.penalties, bill.tds
            ),
            sequence=sequence_key(bill.created_at, RANK_DOCUMENT, bill.id),
            remarks=bill.narration,
        ))
        for advance in bill.advance_payments:
            movements.append(LedgerMovement(
                date=advance.date,
                reference=bill.bill_number,
                description=advance.description or f"Advance ({advance.mode.value})",
                debit_advance=advance.amount,
                sequence=sequence_key(advance.created_at, RANK_ADVANCE, advance.id),
                remarks=advance.reference,
            ))

    bill_ids = [b.id for b in bills]
    bill_numbers = [b.bill_number for b in bills]

    banking = await db.execute(select(BankingEntry).where(
        BankingEntry.type == EntryType.CREDIT,
        BankingEntry.category.in_(PARTY_PAYMENT_BANKING),
        or_(
            BankingEntry.party_id == party.id,
            BankingEntry.reference_name == party.name,
            *_document_links(BankingEntry.bill_id, BankingEntry.reference_id, bill_ids, bill_numbers),
        ),
    ))
    for entry in banking.scalars().all():
        movements.append(LedgerMovement(
            date=entry.date,
            reference=entry.reference_id,
            description=entry.narration,
            debit_payment=entry.amount,
            sequence=sequence_key(entry.created_at, RANK_BANKING, entry.id),
            remarks=entry.category.value,
        ))

    cash = await db.execute(select(CashbookEntry).where(
        CashbookEntry.type == EntryType.CREDIT,
        CashbookEntry.category.in_(PARTY_PAYMENT_CASHBOOK),
        or_(
            CashbookEntry.party_id == party.id,
            CashbookEntry.party_name == party.name,
            *_document_links(CashbookEntry.bill_id, CashbookEntry.reference_id, bill_ids, bill_numbers),
        ),
    ))
    for entry in cash.scalars().all():
        movements.append(LedgerMovement(
            date=entry.date,
            reference=entry.reference_id,
            description=entry.narration,
            debit_payment=entry.amount,
            sequence=sequence_key(entry.created_at, RANK_CASHBOOK, entry.id),
            remarks="cash",
        ))
    return movements


async def supplier_movements(db: AsyncSession, supplier: Supplier) -> List[LedgerMovement]:
    memos_result = await db.execute(
        select(Memo).where(or_(
            Memo.supplier_id == supplier.id,
            and_(Memo.supplier_id.is_(None), Memo.supplier == supplier.name),
        ))
    )
    memos = memos_result.scalars().all()

    movements = []
    for memo in memos:
        movements.append(LedgerMovement(
            date=memo.date,
            reference=memo.memo_number,
            description=f"Memo {memo.memo_number}",
            credit=memo.net_amount,
            sequence=sequence_key(memo.created_at, RANK_DOCUMENT, memo.id),
            remarks=memo.narration,
        ))
        for advance in memo.advance_payments:
            movements.append(LedgerMovement(
                date=advance.date,
                reference=memo.memo_number,
                description=advance.description or f"Advance ({advance.mode.value})",
                debit_advance=advance.amount,
                sequence=sequence_key(advance.created_at, RANK_ADVANCE, advance.id),
                remarks=advance.reference,
            ))

    memo_ids = [m.id for m in memos]
    memo_numbers = [m.memo_number for m in memos]

    banking = await db.execute(select(BankingEntry).where(
        BankingEntry.type == EntryType.DEBIT,
        BankingEntry.category.in_(SUPPLIER_PAYMENT_BANKING),
        or_(
            BankingEntry.supplier_id == supplier.id,
            BankingEntry.reference_name == supplier.name,
            *_document_links(BankingEntry.memo_id, BankingEntry.reference_id, memo_ids, memo_numbers),
        ),
    ))
    for entry in banking.scalars().all():
        movements.append(LedgerMovement(
            date=entry.date,
            reference=entry.reference_id,
            description=entry.narration,
            debit_payment=entry.amount,
            sequence=sequence_key(entry.created_at, RANK_BANKING, entry.id),
            remarks=entry.category.value,
        ))

    cash = await db.execute(select(CashbookEntry).where(
        CashbookEntry.type == EntryType.DEBIT,
        CashbookEntry.category.in_(SUPPLIER_PAYMENT_CASHBOOK),
        or_(
            CashbookEntry.supplier_id == supplier.id,
            CashbookEntry.supplier_name == supplier.name,
            *_document_links(CashbookEntry.memo_id, CashbookEntry.reference_id, memo_ids, memo_numbers),
        ),
    ))
    for entry in cash.scalars().all():
        movements.append(LedgerMovement(
            date=entry.date,
            reference=entry.reference_id,
            description=entry.narration,
            debit_payment=entry.amount,
            sequence=sequence_key(entry.created_at, RANK_CASHBOOK, entry.id),
            remarks="cash",
        ))
    return movements


async def ledger_entry_movements(db: AsyncSession, scope_key: str) -> List[LedgerMovement]:
    result = await db.execute(select(LedgerEntry).where(LedgerEntry.scope_key == scope_key))
    return [
        LedgerMovement(
            date=entry.date,
            reference=entry.memo_number or entry.reference_id,
            description=entry.description,
            credit=entry.credit,
            debit_payment=entry.debit,
            sequence=sequence_key(entry.created_at, RANK_DOCUMENT, entry.id),
            remarks=entry.ledger_type.value,
        )
        for entry in result.scalars().all()
    ]


async def fuel_wallet_movements(db: AsyncSession, wallet_name: str) -> List[LedgerMovement]:
    result = await db.execute(select(FuelTransaction).where(FuelTransaction.wallet_name == wallet_name))
    movements = []
    for txn in result.scalars().all():
        is_credit = txn.type == FuelTransactionType.WALLET_CREDIT
        movements.append(LedgerMovement(
            date=txn.date,
            reference=txn.reference_id or txn.vehicle_no,
            description=txn.narration,
            credit=txn.amount if is_credit else 0.0,
            debit_payment=0.0 if is_credit else txn.amount,
            sequence=sequence_key(txn.created_at, RANK_DOCUMENT, txn.id),
            remarks=txn.vehicle_no,
        ))
    return movements


async def commission_movements(db: AsyncSession, party_id: int) -> List[LedgerMovement]:
    result = await db.execute(select(PartyCommissionLedger).where(PartyCommissionLedger.party_id == party_id))
    movements = []
    for entry in result.scalars().all():
        is_credit = entry.entry_type == EntryType.CREDIT
        movements.append(LedgerMovement(
            date=entry.date,
            reference=entry.bill_number or entry.reference_id,
            description=entry.narration,
            credit=entry.amount if is_credit else 0.0,
            debit_payment=0.0 if is_credit else entry.amount,
            sequence=sequence_key(entry.created_at, RANK_DOCUMENT, entry.id),
        ))
    return movements


def _int_key(scope_type: ScopeType, scope_key: str) -> int:
    try:
        return int(scope_key)
    except (TypeError, ValueError):
        raise BusinessRuleError(f"{scope_type.value} scope key must be a numeric id", {"scope_key": scope_key})


async def build_ledger_snapshot(
    db: AsyncSession,
    scope_type: ScopeType,
    scope_key: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> LedgerSnapshot:
    """
    Load the movements of a scope and build its snapshot.

    Raises:
        ResourceNotFoundError: The party, supplier or fuel wallet does not exist
        BusinessRuleError: Bad scope key or date range
    """
    scope_type = ScopeType(scope_type)
    if date_from and date_to and date_from > date_to:
        raise BusinessRuleError("date_from must not be after date_to", {"date_from": str(date_from), "date_to": str(date_to)})

    if scope_type == ScopeType.PARTY:
        party = await db.get(Party, _int_key(scope_type, scope_key))
        if party is None:
            raise ResourceNotFoundError("Party", scope_key)
        movements, title = await party_movements(db, party), f"Party Ledger - {party.name}"
    elif scope_type == ScopeType.SUPPLIER:
        supplier = await db.get(Supplier, _int_key(scope_type, scope_key))
        if supplier is None:
            raise ResourceNotFoundError("Supplier", scope_key)
        movements, title = await supplier_movements(db, supplier), f"Supplier Ledger - {supplier.name}"
    elif scope_type == ScopeType.VEHICLE:
        if not scope_key:
            raise BusinessRuleError("vehicle scope requires a vehicle number")
        scope_key = scope_key.strip().upper()
        movements, title = await ledger_entry_movements(db, f"vehicle:{scope_key}"), f"Vehicle Ledger - {scope_key}"
    elif scope_type == ScopeType.GENERAL:
        scope_key = "general"
        movements, title = await ledger_entry_movements(db, "general"), "General Ledger"
    elif scope_type == ScopeType.FUEL_WALLET:
        wallet = (await db.execute(select(FuelWallet).where(FuelWallet.name == scope_key))).scalar_one_or_none()
        if wallet is None:
            raise ResourceNotFoundError("Fuel wallet", scope_key)
        movements, title = await fuel_wallet_movements(db, wallet.name), f"Fuel Wallet - {wallet.name}"
    else:
        party_id = _int_key(scope_type, scope_key)
        party = await db.get(Party, party_id)
        name = party.name if party else scope_key
        movements, title = await commission_movements(db, party_id), f"Party Commission Ledger - {name}"

    return build_snapshot(scope_type, scope_key, movements, date_from, date_to, title=title)
