"""
Banking endpoints.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.models.banking_entry import BankingEntry
from roadledger.app.models.enums import BankingCategory, EntryType
from roadledger.app.schemas.banking import (
    BankingEntryCreate,
    BankingEntryUpdate,
    BankingEntryResponse,
    BankingEntryListResponse,
)
from roadledger.app.services import banking_service
from roadledger.app.services.change_notifier import notify_change
from roadledger.app.services.masters import get_or_404

router = APIRouter(prefix="/banking", tags=["Banking"])


@router.get("", response_model=BankingEntryListResponse)
async def list_banking_entries(
    entry_type: Optional[EntryType] = Query(None, alias="type"),
    category: Optional[BankingCategory] = Query(None),
    party_id: Optional[int] = Query(None),
    supplier_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    search: Optional[str] = Query(None, description="Matches reference, name or narration"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    query = select(BankingEntry)
    if entry_type:
        query = query.where(BankingEntry.type == entry_type)
    if category:
        query = query.where(BankingEntry.category == category)
    if party_id is not None:
        query = query.where(BankingEntry.party_id == party_id)
    if supplier_id is not None:
        query = query.where(BankingEntry.supplier_id == supplier_id)
    if date_from:
        query = query.where(BankingEntry.date >= date_from)
    if date_to:
        query = query.where(BankingEntry.date <= date_to)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            BankingEntry.reference_id.ilike(pattern),
            BankingEntry.reference_name.ilike(pattern),
            BankingEntry.narration.ilike(pattern),
        ))
    query = query.order_by(BankingEntry.date.desc(), BankingEntry.created_at.desc(), BankingEntry.id.desc())
    entries, total = await paginate(db, query, page, page_size)
    return BankingEntryListResponse(
        entries=[BankingEntryResponse.model_validate(e) for e in entries],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{entry_id}", response_model=BankingEntryResponse)
async def get_banking_entry(entry_id: int, db: AsyncSession = Depends(get_db)):
    entry = await get_or_404(db, BankingEntry, entry_id, "Banking entry")
    return BankingEntryResponse.model_validate(entry)


@router.post("", response_model=BankingEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_banking_entry(
    entry_data: BankingEntryCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """
    Record a bank movement and post its ledger entry.

    party_commission debits also pay out commission; fuel_wallet debits
    naming a wallet (reference_name) top that wallet up.
    """
    entry = await banking_service.create_banking_entry(db, entry_data)
    await notify_change(redis, *banking_service.affected_collections(entry))
    return BankingEntryResponse.model_validate(entry)


@router.put("/{entry_id}", response_model=BankingEntryResponse)
async def update_banking_entry(
    entry_id: int,
    entry_data: BankingEntryUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    entry = await get_or_404(db, BankingEntry, entry_id, "Banking entry")
    entry = await banking_service.update_banking_entry(db, entry, entry_data.model_dump(exclude_unset=True))
    await notify_change(redis, *banking_service.affected_collections(entry))
    return BankingEntryResponse.model_validate(entry)


@router.delete("/{entry_id}")
async def delete_banking_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    entry = await get_or_404(db, BankingEntry, entry_id, "Banking entry")
    collections = banking_service.affected_collections(entry)
    await banking_service.delete_banking_entry(db, entry)
    await notify_change(redis, *collections)
    return {"message": "Banking entry deleted successfully", "id": entry_id}
