"""
Ledger service.

Writes ledger entries with their running balance and withdraws the entries
a source document posted when that document changes or disappears.

write_posting, write_source_postings and withdraw_source_entries expect the
caller to hold the scope locks of the entries they touch and to commit
before releasing them. post_source_entries and remove_source_entries take
the locks themselves and commit inside them.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.domain.ledger.posting import LedgerPosting
from roadledger.app.domain.ledger.running_balance import (
    scope_locks,
    next_balance,
    find_balance_breaks,
)
from roadledger.app.models.enums import SourceType
from roadledger.app.models.ledger_entry import LedgerEntry

logger = logging.getLogger("roadledger.ledger")


def chronological(query):
    """Ascending ledger order: date, creation time, id."""
    return query.order_by(LedgerEntry.date, LedgerEntry.created_at, LedgerEntry.id)


async def latest_scope_balance(db: AsyncSession, scope_key: str) -> float:
    """Balance of the latest entry of a scope (date desc, created_at desc, id desc), 0 if empty."""
    result = await db.execute(
        select(LedgerEntry.balance)
        .where(LedgerEntry.scope_key == scope_key)
        .order_by(LedgerEntry.date.desc(), LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
        .limit(1)
    )
    balance = result.scalar_one_or_none()
    return balance or 0.0


async def write_posting(
    db: AsyncSession,
    posting: LedgerPosting,
    source_type: Optional[SourceType] = None,
    source_id: Optional[int] = None,
) -> LedgerEntry:
    """
    Append one ledger entry after the latest entry of its scope.

    The caller must hold the scope lock until the transaction commits.
    """
    scope_key = posting.scope_key
    previous = await latest_scope_balance(db, scope_key)
    entry = LedgerEntry(
        reference_id=posting.reference_id,
        reference_name=posting.reference_name,
        ledger_type=posting.ledger_type,
        source_type=source_type,
        source_id=source_id,
        transaction_kind=posting.transaction_kind,
        vehicle_no=posting.vehicle_no,
        party_id=posting.party_id,
        supplier_id=posting.supplier_id,
        scope_key=scope_key,
        description=posting.description,
        memo_number=posting.memo_number,
        debit=posting.debit,
        credit=posting.credit,
        balance=next_balance(previous, posting.credit - posting.debit),
        date=posting.date,
    )
    db.add(entry)
    await db.flush()

    logger.info(
        "Posted ledger entry %s to %s: credit=%s debit=%s balance %s -> %s",
        entry.id, scope_key, entry.credit, entry.debit, previous, entry.balance,
    )
    return entry


async def source_scope_keys(db: AsyncSession, source_type: SourceType, source_id: int) -> Set[str]:
    result = await db.execute(
        select(LedgerEntry.scope_key).where(
            LedgerEntry.source_type == source_type,
            LedgerEntry.source_id == source_id,
        )
    )
    return set(result.scalars().all())


async def withdraw_source_entries(db: AsyncSession, source_type: SourceType, source_id: int) -> int:
    """
    Delete the ledger entries a source document posted.

    Later entries of the same scopes keep their stored balances; run the
    recomputation pass to rebuild them.
    """
    result = await db.execute(
        delete(LedgerEntry).where(
            LedgerEntry.source_type == source_type,
            LedgerEntry.source_id == source_id,
        )
    )
    if result.rowcount:
        logger.info("Withdrew %s ledger entries of %s %s", result.rowcount, source_type.value, source_id)
    return result.rowcount or 0


async def post_source_entries(
    db: AsyncSession,
    source_type: SourceType,
    source_id: int,
    postings: Iterable[LedgerPosting],
    replace: bool = True,
) -> List[LedgerEntry]:
    """
    (Re)post the ledger entries of one source document and commit.

    Holds the locks of every scope involved (old and new) from the
    predecessor reads until the commit, so concurrent writers of the same
    scope are applied one after the other.

    Args:
        db: Database session carrying the source document changes
        source_type: Collection of the source document
        source_id: Primary key of the source document
        postings: Entries to post
        replace: Withdraw entries previously posted by the same source first

    Returns:
        Created ledger entries
    """
    postings = list(postings)
    keys = posting_scope_keys(postings)
    if replace:
        keys |= await source_scope_keys(db, source_type, source_id)

    async with scope_locks.hold(*keys):
        if replace:
            await withdraw_source_entries(db, source_type, source_id)
        entries = await write_source_postings(db, source_type, source_id, postings)
        await db.commit()
    return entries


def posting_scope_keys(postings: Iterable[LedgerPosting]) -> Set[str]:
    return {posting.scope_key for posting in postings}


async def write_source_postings(
    db: AsyncSession,
    source_type: SourceType,
    source_id: int,
    postings: Iterable[LedgerPosting],
) -> List[LedgerEntry]:
    """Write a source's postings in order. No locking, no commit."""
    return [await write_posting(db, posting, source_type, source_id) for posting in postings]


async def remove_source_entries(
    db: AsyncSession,
    source_type: SourceType,
    source_id: int,
    source=None,
) -> int:
    """
    Withdraw a source's entries and commit under their scope locks.

    When the source row is given it is deleted in the same transaction.
    """
    keys = await source_scope_keys(db, source_type, source_id)
    async with scope_locks.hold(*keys):
        removed = await withdraw_source_entries(db, source_type, source_id)
        if source is not None:
            await db.delete(source)
        await db.commit()
    return removed


async def scope_entries(db: AsyncSession, scope_key: str) -> List[LedgerEntry]:
    result = await db.execute(chronological(select(LedgerEntry).where(LedgerEntry.scope_key == scope_key)))
    return list(result.scalars().all())


async def all_scope_keys(db: AsyncSession) -> List[str]:
    result = await db.execute(select(LedgerEntry.scope_key).distinct().order_by(LedgerEntry.scope_key))
    return list(result.scalars().all())


async def check_scope_balances(db: AsyncSession, scope_key: str) -> List[Dict]:
    """Entries whose stored balance does not follow from their predecessor."""
    entries = await scope_entries(db, scope_key)
    breaks = find_balance_breaks([(e.credit - e.debit, e.balance) for e in entries])
    report = []
    for index in breaks:
        entry = entries[index]
        previous = entries[index - 1].balance if index > 0 else 0.0
        report.append({
            "scope_key": scope_key,
            "entry_id": entry.id,
            "stored_balance": entry.balance,
            "expected_balance": next_balance(previous, entry.credit - entry.debit),
        })
    return report


async def recompute_scope_balances(db: AsyncSession, scope_key: str) -> tuple[int, int]:
    """
    Rewrite the stored balances of one scope in chronological order.

    Returns:
        (entries scanned, entries changed). Commits before releasing the scope lock.
    """
    async with scope_locks.hold(scope_key):
        entries = await scope_entries(db, scope_key)
        balance = 0.0
        changed = 0
        for entry in entries:
            balance = next_balance(balance, entry.credit - entry.debit)
            if entry.balance != balance:
                entry.balance = balance
                changed += 1
        await db.commit()
    return len(entries), changed


async def recompute_all_balances(db: AsyncSession) -> Dict[str, int]:
    """Explicit recomputation pass over every ledger scope."""
    scanned = updated = 0
    keys = await all_scope_keys(db)
    for key in keys:
        count, changed = await recompute_scope_balances(db, key)
        scanned += count
        updated += changed
    logger.info("Recomputed ledger balances: %s scopes, %s entries, %s changed", len(keys), scanned, updated)
    return {"scopes": len(keys), "scanned": scanned, "updated": updated}
