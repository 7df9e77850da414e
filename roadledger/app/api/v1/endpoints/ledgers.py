"""
Ledger endpoints.

Entries posted by memos, banking, cashbook and fuel allocations are
maintained by those collections; this router adds manual entries, per-name
summaries, scope snapshots and the balance check / recompute passes.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.domain.ledger.posting import LedgerPosting
from roadledger.app.domain.ledger.running_balance import scope_locks
from roadledger.app.domain.ledger.snapshot import ScopeType
from roadledger.app.models.enums import LedgerType
from roadledger.app.models.ledger_entry import LedgerEntry
from roadledger.app.schemas.ledger import (
    LedgerEntryCreate,
    LedgerEntryUpdate,
    LedgerEntryResponse,
    LedgerEntryListResponse,
    LedgerSummaryResponse,
    LedgerSnapshotResponse,
    BalanceBreak,
    LedgerRecomputeResponse,
)
from roadledger.app.services import ledger_service
from roadledger.app.services.change_notifier import Collection, notify_change
from roadledger.app.services.ledger_snapshot_service import build_ledger_snapshot
from roadledger.app.services.masters import get_or_404

router = APIRouter(prefix="/ledgers", tags=["Ledgers"])


@router.get("", response_model=LedgerEntryListResponse)
async def list_ledger_entries(
    vehicle_no: Optional[str] = Query(None),
    party_id: Optional[int] = Query(None),
    supplier_id: Optional[int] = Query(None),
    ledger_type: Optional[LedgerType] = Query(None),
    scope_key: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    """List ledger entries in ledger order (date asc, creation asc)."""
    query = select(LedgerEntry)
    if vehicle_no:
        query = query.where(LedgerEntry.vehicle_no == vehicle_no.strip().upper())
    if party_id is not None:
        query = query.where(LedgerEntry.party_id == party_id)
    if supplier_id is not None:
        query = query.where(LedgerEntry.supplier_id == supplier_id)
    if ledger_type:
        query = query.where(LedgerEntry.ledger_type == ledger_type)
    if scope_key:
        query = query.where(LedgerEntry.scope_key == scope_key)
    if date_from:
        query = query.where(LedgerEntry.date >= date_from)
    if date_to:
        query = query.where(LedgerEntry.date <= date_to)
    entries, total = await paginate(db, ledger_service.chronological(query), page, page_size)
    return LedgerEntryListResponse(
        entries=[LedgerEntryResponse.model_validate(e) for e in entries],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/summary/{reference_name}", response_model=LedgerSummaryResponse)
async def ledger_summary(reference_name: str, db: AsyncSession = Depends(get_db)):
    """Debit and credit totals of every entry carrying this reference name."""
    result = await db.execute(
        ledger_service.chronological(select(LedgerEntry).where(LedgerEntry.reference_name == reference_name))
    )
    entries = list(result.scalars().all())
    total_debit = round(sum(e.debit for e in entries), 2)
    total_credit = round(sum(e.credit for e in entries), 2)
    return LedgerSummaryResponse(
        reference_name=reference_name,
        total_debit=total_debit,
        total_credit=total_credit,
        balance=round(total_credit - total_debit, 2),
        entry_count=len(entries),
        entries=[LedgerEntryResponse.model_validate(e) for e in entries],
    )


@router.get("/snapshot", response_model=LedgerSnapshotResponse)
async def ledger_snapshot(
    scope_type: ScopeType = Query(...),
    scope_key: Optional[str] = Query(None, description="Party/supplier id, vehicle number or wallet name"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    snapshot = await build_ledger_snapshot(db, scope_type, scope_key, date_from, date_to)
    return LedgerSnapshotResponse.model_validate(snapshot)


@router.get("/balance-check", response_model=List[BalanceBreak])
async def balance_check(
    scope_key: Optional[str] = Query(None, description="Omit to check every scope"),
    db: AsyncSession = Depends(get_db)
):
    """Entries whose stored balance does not follow from the previous entry of their scope."""
    keys = [scope_key] if scope_key else await ledger_service.all_scope_keys(db)
    report = []
    for key in keys:
        report.extend(await ledger_service.check_scope_balances(db, key))
    return [BalanceBreak(**item) for item in report]


@router.post("/recompute-balances", response_model=LedgerRecomputeResponse)
async def recompute_balances(db: AsyncSession = Depends(get_db), redis=Depends(get_redis)):
    result = await ledger_service.recompute_all_balances(db)
    if result["updated"]:
        await notify_change(redis, Collection.LEDGER_ENTRIES)
    return LedgerRecomputeResponse(**result)


@router.get("/{entry_id}", response_model=LedgerEntryResponse)
async def get_ledger_entry(entry_id: int, db: AsyncSession = Depends(get_db)):
    entry = await get_or_404(db, LedgerEntry, entry_id, "Ledger entry")
    return LedgerEntryResponse.model_validate(entry)


@router.post("", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_ledger_entry(
    entry_data: LedgerEntryCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """
    Post a manual ledger entry.

    The balance is the latest balance of the entry's scope plus
    credit minus debit; any balance sent by the client is ignored.
    """
    posting = LedgerPosting(**entry_data.model_dump())
    async with scope_locks.hold(posting.scope_key):
        entry = await ledger_service.write_posting(db, posting)
        await db.commit()
    await db.refresh(entry)

    await notify_change(redis, Collection.LEDGER_ENTRIES)
    return LedgerEntryResponse.model_validate(entry)


@router.put("/{entry_id}", response_model=LedgerEntryResponse)
async def update_ledger_entry(
    entry_id: int,
    entry_data: LedgerEntryUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    entry = await get_or_404(db, LedgerEntry, entry_id, "Ledger entry")
    for field, value in entry_data.model_dump(exclude_unset=True).items():
        setattr(entry, field, value)
    await db.commit()
    await db.refresh(entry)

    await notify_change(redis, Collection.LEDGER_ENTRIES)
    return LedgerEntryResponse.model_validate(entry)


@router.delete("/{entry_id}")
async def delete_ledger_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """Delete one entry. Later balances of the scope stay as stored until a recompute."""
    entry = await get_or_404(db, LedgerEntry, entry_id, "Ledger entry")
    async with scope_locks.hold(entry.scope_key):
        await db.delete(entry)
        await db.commit()

    await notify_change(redis, Collection.LEDGER_ENTRIES)
    return {"message": "Ledger entry deleted successfully", "id": entry_id}
