"""
Banking service.

Every banking entry posts exactly one ledger entry. Some categories have
extra effects:

- party_commission debits pay out commission (commission ledger debit)
- fuel_wallet debits naming a wallet top up that fuel wallet
"""

import logging
from typing import Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.domain.ledger.posting import banking_postings
from roadledger.app.models.banking_entry import BankingEntry
from roadledger.app.models.enums import BankingCategory, EntryType, SourceType
from roadledger.app.models.fuel_transaction import FuelTransaction
from roadledger.app.schemas.banking import BankingEntryCreate
from roadledger.app.services import commission_service, fuel_service, ledger_service
from roadledger.app.services.change_notifier import Collection
from roadledger.app.services.masters import find_party_by_name

logger = logging.getLogger("roadledger.banking")


def affected_collections(entry: BankingEntry) -> Set[Collection]:
    """Collections a banking entry writes to besides itself."""
    collections = {Collection.BANKING_ENTRIES, Collection.LEDGER_ENTRIES}
    if entry.category == BankingCategory.PARTY_COMMISSION:
        collections.add(Collection.PARTY_COMMISSION_LEDGER)
    if entry.category == BankingCategory.FUEL_WALLET:
        collections |= {Collection.FUEL_WALLETS, Collection.FUEL_TRANSACTIONS}
    return collections


async def _resolve_party_id(db: AsyncSession, entry: BankingEntry) -> Optional[int]:
    if entry.party_id is not None:
        return entry.party_id
    party = await find_party_by_name(db, entry.reference_name)
    return party.id if party else None


async def _post_ledger(db: AsyncSession, entry: BankingEntry, replace: bool) -> None:
    party_id = None
    if entry.category == BankingCategory.PARTY_ON_ACCOUNT:
        party_id = await _resolve_party_id(db, entry)
    await ledger_service.post_source_entries(
        db, SourceType.BANKING, entry.id, banking_postings(entry, party_id), replace=replace
    )


async def _sync_commission_payment(db: AsyncSession, entry: BankingEntry) -> None:
    await commission_service.remove_banking_commission(db, entry.id)
    if entry.category != BankingCategory.PARTY_COMMISSION or entry.type != EntryType.DEBIT:
        return
    party_id = await _resolve_party_id(db, entry)
    if party_id is None:
        logger.warning("Commission payment %s has no resolvable party, commission ledger not updated", entry.id)
        return
    await commission_service.record_commission_payment(db, entry, party_id, entry.reference_name or "")


async def create_banking_entry(db: AsyncSession, data: BankingEntryCreate) -> BankingEntry:
    entry = BankingEntry(**data.model_dump())
    db.add(entry)
    await db.flush()

    await _sync_commission_payment(db, entry)
    await _post_ledger(db, entry, replace=False)

    if (
        entry.category == BankingCategory.FUEL_WALLET
        and entry.type == EntryType.DEBIT
        and entry.reference_name
    ):
        top_up = FuelTransaction(
            wallet_name=entry.reference_name,
            amount=entry.amount,
            date=entry.date,
            reference_id=entry.reference_id,
            narration=f"Wallet top-up from bank: {entry.narration}",
            fuel_type="Diesel",
            banking_entry_id=entry.id,
        )
        await fuel_service.credit_wallet(db, entry.reference_name, entry.amount, top_up)

    await db.refresh(entry)
    return entry


async def update_banking_entry(db: AsyncSession, entry: BankingEntry, changes: dict) -> BankingEntry:
    """
    Apply changes and re-post the ledger and commission rows.

    A fuel wallet top-up made when the entry was created is not adjusted.
    """
    for field, value in changes.items():
        setattr(entry, field, value)
    await db.flush()

    await _sync_commission_payment(db, entry)
    await _post_ledger(db, entry, replace=True)
    await db.refresh(entry)
    return entry


async def delete_banking_entry(db: AsyncSession, entry: BankingEntry) -> None:
    """Remove the entry with the ledger and commission rows it created."""
    await commission_service.remove_banking_commission(db, entry.id)
    await ledger_service.remove_source_entries(db, SourceType.BANKING, entry.id, source=entry)
