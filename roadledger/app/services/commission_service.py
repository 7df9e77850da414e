"""
Party commission ledger service.

A bill's party_commission_cut is withheld from the party as a commission
credit; party_commission banking debits pay it out.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, delete, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.models.bill import Bill
from roadledger.app.models.banking_entry import BankingEntry
from roadledger.app.models.enums import EntryType
from roadledger.app.models.party_commission_ledger import PartyCommissionLedger

logger = logging.getLogger("roadledger.commission")


async def sync_bill_commission_cut(db: AsyncSession, bill: Bill) -> Optional[PartyCommissionLedger]:
    """
    Make the commission ledger match the bill's current cut. Does not commit.

    Any previous credit of the bill is replaced; no credit is kept when the
    cut is zero or the bill has no party master.
    """
    await db.execute(
        delete(PartyCommissionLedger).where(
            PartyCommissionLedger.bill_id == bill.id,
            PartyCommissionLedger.entry_type == EntryType.CREDIT,
        )
    )
    if not bill.party_commission_cut or bill.party_commission_cut <= 0 or bill.party_id is None:
        return None

    entry = PartyCommissionLedger(
        party_id=bill.party_id,
        party_name=bill.party_name or bill.party,
        bill_id=bill.id,
        bill_number=bill.bill_number,
        reference_id=bill.bill_number,
        date=bill.date,
        entry_type=EntryType.CREDIT,
        amount=bill.party_commission_cut,
        narration=f"Commission Cut – Bill No. {bill.bill_number}",
    )
    db.add(entry)
    await db.flush()
    logger.info("Commission credit %s for bill %s (party %s)", entry.amount, bill.bill_number, bill.party_id)
    return entry


async def record_commission_payment(
    db: AsyncSession,
    banking_entry: BankingEntry,
    party_id: int,
    party_name: str,
) -> PartyCommissionLedger:
    """Commission paid out through the bank. Does not commit."""
    entry = PartyCommissionLedger(
        party_id=party_id,
        party_name=party_name,
        banking_entry_id=banking_entry.id,
        bill_number=banking_entry.reference_id,
        reference_id=banking_entry.reference_id,
        date=banking_entry.date,
        entry_type=EntryType.DEBIT,
        amount=banking_entry.amount,
        narration=f"Commission Payment – Bank Ref #{banking_entry.id:06d}",
    )
    db.add(entry)
    await db.flush()
    logger.info("Commission debit %s for party %s from banking %s", entry.amount, party_id, banking_entry.id)
    return entry


async def remove_banking_commission(db: AsyncSession, banking_entry_id: int) -> None:
    await db.execute(
        delete(PartyCommissionLedger).where(PartyCommissionLedger.banking_entry_id == banking_entry_id)
    )


async def remove_bill_commission(db: AsyncSession, bill_id: int) -> None:
    await db.execute(delete(PartyCommissionLedger).where(PartyCommissionLedger.bill_id == bill_id))


def _totals_columns():
    credit = func.coalesce(func.sum(case(
        (PartyCommissionLedger.entry_type == EntryType.CREDIT, PartyCommissionLedger.amount), else_=0
    )), 0)
    debit = func.coalesce(func.sum(case(
        (PartyCommissionLedger.entry_type == EntryType.DEBIT, PartyCommissionLedger.amount), else_=0
    )), 0)
    return credit, debit


async def commission_summary(db: AsyncSession, party_id: Optional[int] = None) -> dict:
    """Total credits, debits and entries, balance = credits - debits."""
    credit, debit = _totals_columns()
    query = select(credit, debit, func.count(PartyCommissionLedger.id))
    if party_id is not None:
        query = query.where(PartyCommissionLedger.party_id == party_id)
    total_credits, total_debits, count = (await db.execute(query)).one()

    party_name = None
    if party_id is not None:
        name_result = await db.execute(
            select(PartyCommissionLedger.party_name)
            .where(PartyCommissionLedger.party_id == party_id)
            .order_by(PartyCommissionLedger.id.desc())
            .limit(1)
        )
        party_name = name_result.scalar_one_or_none()

    return {
        "party_id": party_id,
        "party_name": party_name,
        "total_credits": round(float(total_credits), 2),
        "total_debits": round(float(total_debits), 2),
        "total_entries": count,
        "balance": round(float(total_credits) - float(total_debits), 2),
    }


async def party_summaries(db: AsyncSession) -> List[dict]:
    """Per-party totals sorted by party name."""
    credit, debit = _totals_columns()
    result = await db.execute(
        select(
            PartyCommissionLedger.party_id,
            func.max(PartyCommissionLedger.party_name),
            credit,
            debit,
            func.count(PartyCommissionLedger.id),
        )
        .group_by(PartyCommissionLedger.party_id)
    )
    summaries = [
        {
            "party_id": party_id,
            "party_name": party_name,
            "total_credits": round(float(total_credits), 2),
            "total_debits": round(float(total_debits), 2),
            "total_entries": count,
            "balance": round(float(total_credits) - float(total_debits), 2),
        }
        for party_id, party_name, total_credits, total_debits, count in result.all()
    ]
    return sorted(summaries, key=lambda s: (s["party_name"] or "").lower())
