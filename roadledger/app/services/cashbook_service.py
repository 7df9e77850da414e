"""
Cashbook service.

The cashbook carries a single running balance across every category. A new
entry takes the balance of the latest entry (date desc, created_at desc)
and adds or subtracts its amount. The balance is captured once at insert:
back-dated inserts, edits and deletes leave later balances untouched until
recompute_cashbook_balances is run explicitly.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.domain.ledger.posting import cashbook_postings
from roadledger.app.domain.ledger.running_balance import scope_locks, next_balance, signed_amount
from roadledger.app.models.cashbook_entry import CashbookEntry
from roadledger.app.models.enums import PaymentMode, SourceType
from roadledger.app.schemas.cashbook import CashbookEntryCreate
from roadledger.app.services import ledger_service

logger = logging.getLogger("roadledger.cashbook")

CASHBOOK_SCOPE = "cashbook"


async def latest_cashbook_entry(db: AsyncSession) -> Optional[CashbookEntry]:
    result = await db.execute(
        select(CashbookEntry)
        .order_by(CashbookEntry.date.desc(), CashbookEntry.created_at.desc(), CashbookEntry.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def insert_cashbook_entry(db: AsyncSession, data: CashbookEntryCreate) -> CashbookEntry:
    """
    Read the predecessor and insert the new entry. Flushes, does not commit.

    This is the bare read-then-write step; callers that may run concurrently
    must hold the cashbook lock across it and the commit (see
    create_cashbook_entry).
    """
    previous = await latest_cashbook_entry(db)
    previous_balance = previous.running_balance if previous else 0.0

    entry = CashbookEntry(**data.model_dump())
    entry.payment_mode = PaymentMode.CASH
    entry.running_balance = next_balance(previous_balance, signed_amount(data.type, data.amount))
    db.add(entry)
    await db.flush()

    logger.info(
        "Cashbook %s %s (%s): balance %s -> %s",
        data.type.value, data.amount, data.category.value, previous_balance, entry.running_balance,
    )
    return entry


async def create_cashbook_entry(db: AsyncSession, data: CashbookEntryCreate) -> CashbookEntry:
    """
    Create a cashbook entry with its running balance and post its ledger entry.

    The cashbook lock and the ledger scope locks are held from the
    predecessor reads until the single commit, so the entry and its ledger
    line are stored together or not at all.
    """
    # Scopes only depend on category and vehicle, not on the id
    scopes = ledger_service.posting_scope_keys(cashbook_postings(CashbookEntry(**data.model_dump())))
    async with scope_locks.hold(CASHBOOK_SCOPE, *scopes):
        entry = await insert_cashbook_entry(db, data)
        await ledger_service.write_source_postings(db, SourceType.CASHBOOK, entry.id, cashbook_postings(entry))
        await db.commit()

    await db.refresh(entry)
    return entry


async def update_cashbook_entry(db: AsyncSession, entry: CashbookEntry, changes: dict) -> CashbookEntry:
    """Apply changes and re-post the ledger entry. running_balance is not touched."""
    for field, value in changes.items():
        setattr(entry, field, value)
    await db.flush()
    await ledger_service.post_source_entries(db, SourceType.CASHBOOK, entry.id, cashbook_postings(entry))
    await db.refresh(entry)
    return entry


async def delete_cashbook_entry(db: AsyncSession, entry: CashbookEntry) -> None:
    await ledger_service.remove_source_entries(db, SourceType.CASHBOOK, entry.id, source=entry)


async def recompute_cashbook_balances(db: AsyncSession) -> dict:
    """
    Explicit recomputation pass.

    Walks every entry in (date, created_at, id) order and rewrites
    running_balance where it differs from the accumulated value.
    """
    async with scope_locks.hold(CASHBOOK_SCOPE):
        result = await db.execute(
            select(CashbookEntry).order_by(CashbookEntry.date, CashbookEntry.created_at, CashbookEntry.id)
        )
        entries = result.scalars().all()

        balance = 0.0
        updated = 0
        for entry in entries:
            balance = next_balance(balance, signed_amount(entry.type, entry.amount))
            if entry.running_balance != balance:
                entry.running_balance = balance
                updated += 1
        await db.commit()

    logger.info("Recomputed cashbook balances: %s entries, %s changed, final %s", len(entries), updated, balance)
    return {"scanned": len(entries), "updated": updated, "final_balance": balance}
