"""
Cashbook endpoints.

The running balance is assigned once at insert time. Edits, deletes and
back-dated inserts leave stored balances alone; POST /recompute-balances
rebuilds them on demand.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.models.cashbook_entry import CashbookEntry
from roadledger.app.models.enums import CashbookCategory, EntryType
from roadledger.app.schemas.cashbook import (
    CashbookEntryCreate,
    CashbookEntryUpdate,
    CashbookEntryResponse,
    CashbookEntryListResponse,
    BalanceRecomputeResponse,
)
from roadledger.app.services import cashbook_service
from roadledger.app.services.change_notifier import Collection, notify_change
from roadledger.app.services.masters import get_or_404

router = APIRouter(prefix="/cashbook", tags=["Cashbook"])


@router.get("", response_model=CashbookEntryListResponse)
async def list_cashbook_entries(
    entry_type: Optional[EntryType] = Query(None, alias="type"),
    category: Optional[CashbookCategory] = Query(None),
    vehicle_no: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    search: Optional[str] = Query(None, description="Matches reference, name or narration"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    """List cash entries, latest first (date desc, creation desc)."""
    query = select(CashbookEntry)
    if entry_type:
        query = query.where(CashbookEntry.type == entry_type)
    if category:
        query = query.where(CashbookEntry.category == category)
    if vehicle_no:
        query = query.where(CashbookEntry.vehicle_no == vehicle_no.strip().upper())
    if date_from:
        query = query.where(CashbookEntry.date >= date_from)
    if date_to:
        query = query.where(CashbookEntry.date <= date_to)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            CashbookEntry.reference_id.ilike(pattern),
            CashbookEntry.reference_name.ilike(pattern),
            CashbookEntry.narration.ilike(pattern),
        ))
    query = query.order_by(CashbookEntry.date.desc(), CashbookEntry.created_at.desc(), CashbookEntry.id.desc())
    entries, total = await paginate(db, query, page, page_size)
    return CashbookEntryListResponse(
        entries=[CashbookEntryResponse.model_validate(e) for e in entries],
        total=total,
        page=page,
        page_size=page_size
    )


@router.post("/recompute-balances", response_model=BalanceRecomputeResponse)
async def recompute_balances(
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """Explicit pass that rewrites every running balance in chronological order."""
    result = await cashbook_service.recompute_cashbook_balances(db)
    if result["updated"]:
        await notify_change(redis, Collection.CASHBOOK_ENTRIES)
    return BalanceRecomputeResponse(**result)


@router.get("/{entry_id}", response_model=CashbookEntryResponse)
async def get_cashbook_entry(entry_id: int, db: AsyncSession = Depends(get_db)):
    entry = await get_or_404(db, CashbookEntry, entry_id, "Cashbook entry")
    return CashbookEntryResponse.model_validate(entry)


@router.post("", response_model=CashbookEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_cashbook_entry(
    entry_data: CashbookEntryCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """Record a cash movement. payment_mode is always cash."""
    entry = await cashbook_service.create_cashbook_entry(db, entry_data)
    await notify_change(redis, Collection.CASHBOOK_ENTRIES, Collection.LEDGER_ENTRIES)
    return CashbookEntryResponse.model_validate(entry)


@router.put("/{entry_id}", response_model=CashbookEntryResponse)
async def update_cashbook_entry(
    entry_id: int,
    entry_data: CashbookEntryUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    entry = await get_or_404(db, CashbookEntry, entry_id, "Cashbook entry")
    entry = await cashbook_service.update_cashbook_entry(db, entry, entry_data.model_dump(exclude_unset=True))
    await notify_change(redis, Collection.CASHBOOK_ENTRIES, Collection.LEDGER_ENTRIES)
    return CashbookEntryResponse.model_validate(entry)


@router.delete("/{entry_id}")
async def delete_cashbook_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    entry = await get_or_404(db, CashbookEntry, entry_id, "Cashbook entry")
    await cashbook_service.delete_cashbook_entry(db, entry)
    await notify_change(redis, Collection.CASHBOOK_ENTRIES, Collection.LEDGER_ENTRIES)
    return {"message": "Cashbook entry deleted successfully", "id": entry_id}
