"""
Bill endpoints.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.models.bill import Bill
from roadledger.app.models.enums import BillStatus
from roadledger.app.schemas.advance_payment import AdvancePaymentCreate
from roadledger.app.schemas.bill import BillCreate, BillUpdate, BillMarkReceived, BillResponse, BillListResponse
from roadledger.app.services import bill_service
from roadledger.app.services.change_notifier import Collection, notify_change
from roadledger.app.services.masters import get_or_404

router = APIRouter(prefix="/bills", tags=["Bills"])


@router.get("", response_model=BillListResponse)
async def list_bills(
    status_filter: Optional[BillStatus] = Query(None, alias="status"),
    party_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    search: Optional[str] = Query(None, description="Matches bill number or party"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    query = select(Bill)
    if status_filter:
        query = query.where(Bill.status == status_filter)
    if party_id is not None:
        query = query.where(Bill.party_id == party_id)
    if date_from:
        query = query.where(Bill.date >= date_from)
    if date_to:
        query = query.where(Bill.date <= date_to)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Bill.bill_number.ilike(pattern), Bill.party.ilike(pattern)))
    query = query.order_by(Bill.date.desc(), Bill.created_at.desc(), Bill.id.desc())
    bills, total = await paginate(db, query, page, page_size)
    return BillListResponse(
        bills=[BillResponse.model_validate(b) for b in bills],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{bill_id}", response_model=BillResponse)
async def get_bill(bill_id: int, db: AsyncSession = Depends(get_db)):
    bill = await get_or_404(db, Bill, bill_id, "Bill")
    return BillResponse.model_validate(bill)


@router.post("", response_model=BillResponse, status_code=status.HTTP_201_CREATED)
async def create_bill(
    bill_data: BillCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """
    Raise a bill for a loading slip.

    net_amount and total_freight are computed here; a positive
    party_commission_cut is credited to the party commission ledger.
    """
    bill = await bill_service.create_bill(db, bill_data)
    await notify_change(redis, Collection.BILLS, Collection.PARTY_COMMISSION_LEDGER)
    return BillResponse.model_validate(bill)


@router.put("/{bill_id}", response_model=BillResponse)
async def update_bill(
    bill_id: int,
    bill_data: BillUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    bill = await get_or_404(db, Bill, bill_id, "Bill")
    bill = await bill_service.update_bill(db, bill, bill_data.model_dump(exclude_unset=True))
    await notify_change(redis, Collection.BILLS, Collection.PARTY_COMMISSION_LEDGER)
    return BillResponse.model_validate(bill)


@router.patch("/{bill_id}/received", response_model=BillResponse)
async def mark_bill_received(
    bill_id: int,
    receipt: BillMarkReceived,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    bill = await get_or_404(db, Bill, bill_id, "Bill")
    bill = await bill_service.mark_bill_received(db, bill, receipt.received_date, receipt.received_amount)
    await notify_change(redis, Collection.BILLS)
    return BillResponse.model_validate(bill)


@router.post("/{bill_id}/advance", response_model=BillResponse)
async def add_bill_advance(
    bill_id: int,
    advance: AdvancePaymentCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    bill = await get_or_404(db, Bill, bill_id, "Bill")
    bill = await bill_service.add_bill_advance(db, bill, advance)
    await notify_change(redis, Collection.BILLS)
    return BillResponse.model_validate(bill)


@router.delete("/{bill_id}")
async def delete_bill(
    bill_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    bill = await get_or_404(db, Bill, bill_id, "Bill")
    await bill_service.delete_bill(db, bill)
    await notify_change(redis, Collection.BILLS, Collection.PARTY_COMMISSION_LEDGER)
    return {"message": "Bill deleted successfully", "id": bill_id}
