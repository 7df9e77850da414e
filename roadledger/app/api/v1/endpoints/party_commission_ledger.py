"""
Party commission ledger endpoints.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.models.party import Party
from roadledger.app.models.party_commission_ledger import PartyCommissionLedger
from roadledger.app.schemas.commission import (
    CommissionEntryCreate,
    CommissionEntryUpdate,
    CommissionEntryResponse,
    CommissionEntryListResponse,
    CommissionSummary,
)
from roadledger.app.services import commission_service
from roadledger.app.services.change_notifier import Collection, notify_change
from roadledger.app.services.masters import get_or_404

router = APIRouter(prefix="/party-commission-ledger", tags=["Party Commission Ledger"])


@router.get("", response_model=CommissionEntryListResponse)
async def list_commission_entries(
    party_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    bill_number: Optional[str] = Query(None, description="Substring match"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    query = select(PartyCommissionLedger)
    if party_id is not None:
        query = query.where(PartyCommissionLedger.party_id == party_id)
    if date_from:
        query = query.where(PartyCommissionLedger.date >= date_from)
    if date_to:
        query = query.where(PartyCommissionLedger.date <= date_to)
    if bill_number:
        query = query.where(PartyCommissionLedger.bill_number.ilike(f"%{bill_number.strip()}%"))
    query = query.order_by(
        PartyCommissionLedger.date.desc(), PartyCommissionLedger.created_at.desc(), PartyCommissionLedger.id.desc()
    )
    entries, total = await paginate(db, query, page, page_size)
    return CommissionEntryListResponse(
        entries=[CommissionEntryResponse.model_validate(e) for e in entries],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/summary", response_model=CommissionSummary)
async def commission_summary(
    party_id: Optional[int] = Query(None, description="Omit for all parties"),
    db: AsyncSession = Depends(get_db)
):
    return CommissionSummary(**await commission_service.commission_summary(db, party_id))


@router.get("/parties", response_model=List[CommissionSummary])
async def commission_parties(db: AsyncSession = Depends(get_db)):
    """Per-party totals, sorted by party name."""
    return [CommissionSummary(**s) for s in await commission_service.party_summaries(db)]


@router.post("", response_model=CommissionEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_commission_entry(
    entry_data: CommissionEntryCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    party = await get_or_404(db, Party, entry_data.party_id, "Party")
    fields = entry_data.model_dump()
    fields["party_name"] = fields.get("party_name") or party.name
    entry = PartyCommissionLedger(**fields)
    db.add(entry)
    await db.commit()
    await db.refresh(entry)

    await notify_change(redis, Collection.PARTY_COMMISSION_LEDGER)
    return CommissionEntryResponse.model_validate(entry)


@router.get("/{entry_id}", response_model=CommissionEntryResponse)
async def get_commission_entry(entry_id: int, db: AsyncSession = Depends(get_db)):
    entry = await get_or_404(db, PartyCommissionLedger, entry_id, "Commission entry")
    return CommissionEntryResponse.model_validate(entry)


@router.put("/{entry_id}", response_model=CommissionEntryResponse)
async def update_commission_entry(
    entry_id: int,
    entry_data: CommissionEntryUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    entry = await get_or_404(db, PartyCommissionLedger, entry_id, "Commission entry")
    for field, value in entry_data.model_dump(exclude_unset=True).items():
        setattr(entry, field, value)
    await db.commit()
    await db.refresh(entry)

    await notify_change(redis, Collection.PARTY_COMMISSION_LEDGER)
    return CommissionEntryResponse.model_validate(entry)


@router.delete("/{entry_id}")
async def delete_commission_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    entry = await get_or_404(db, PartyCommissionLedger, entry_id, "Commission entry")
    await db.delete(entry)
    await db.commit()

    await notify_change(redis, Collection.PARTY_COMMISSION_LEDGER)
    return {"message": "Commission entry deleted successfully", "id": entry_id}
