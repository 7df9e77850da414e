"""
Memo endpoints.

Every write re-posts the memo's ledger entries, so ledger_entries is
announced alongside memos.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.models.enums import MemoStatus
from roadledger.app.models.memo import Memo
from roadledger.app.schemas.advance_payment import AdvancePaymentCreate
from roadledger.app.schemas.memo import MemoCreate, MemoUpdate, MemoMarkPaid, MemoResponse, MemoListResponse
from roadledger.app.services import memo_service
from roadledger.app.services.change_notifier import Collection, notify_change
from roadledger.app.services.masters import get_or_404

router = APIRouter(prefix="/memos", tags=["Memos"])


@router.get("", response_model=MemoListResponse)
async def list_memos(
    status_filter: Optional[MemoStatus] = Query(None, alias="status"),
    supplier_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    search: Optional[str] = Query(None, description="Matches memo number or supplier"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    query = select(Memo)
    if status_filter:
        query = query.where(Memo.status == status_filter)
    if supplier_id is not None:
        query = query.where(Memo.supplier_id == supplier_id)
    if date_from:
        query = query.where(Memo.date >= date_from)
    if date_to:
        query = query.where(Memo.date <= date_to)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Memo.memo_number.ilike(pattern), Memo.supplier.ilike(pattern)))
    query = query.order_by(Memo.date.desc(), Memo.created_at.desc(), Memo.id.desc())
    memos, total = await paginate(db, query, page, page_size)
    return MemoListResponse(
        memos=[MemoResponse.model_validate(m) for m in memos],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{memo_id}", response_model=MemoResponse)
async def get_memo(memo_id: int, db: AsyncSession = Depends(get_db)):
    memo = await get_or_404(db, Memo, memo_id, "Memo")
    return MemoResponse.model_validate(memo)


@router.post("", response_model=MemoResponse, status_code=status.HTTP_201_CREATED)
async def create_memo(
    memo_data: MemoCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """
    Create a memo for a loading slip.

    Returns 400 when the slip does not exist or already has a memo.
    """
    memo = await memo_service.create_memo(db, memo_data)
    await notify_change(redis, Collection.MEMOS, Collection.LEDGER_ENTRIES)
    return MemoResponse.model_validate(memo)


@router.put("/{memo_id}", response_model=MemoResponse)
async def update_memo(
    memo_id: int,
    memo_data: MemoUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    memo = await get_or_404(db, Memo, memo_id, "Memo")
    memo = await memo_service.update_memo(db, memo, memo_data.model_dump(exclude_unset=True))
    await notify_change(redis, Collection.MEMOS, Collection.LEDGER_ENTRIES)
    return MemoResponse.model_validate(memo)


@router.patch("/{memo_id}/paid", response_model=MemoResponse)
async def mark_memo_paid(
    memo_id: int,
    payment: MemoMarkPaid,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    memo = await get_or_404(db, Memo, memo_id, "Memo")
    memo = await memo_service.mark_memo_paid(db, memo, payment.paid_date, payment.paid_amount)
    await notify_change(redis, Collection.MEMOS)
    return MemoResponse.model_validate(memo)


@router.post("/{memo_id}/advance", response_model=MemoResponse)
async def add_memo_advance(
    memo_id: int,
    advance: AdvancePaymentCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    memo = await get_or_404(db, Memo, memo_id, "Memo")
    memo = await memo_service.add_memo_advance(db, memo, advance)
    await notify_change(redis, Collection.MEMOS)
    return MemoResponse.model_validate(memo)


@router.delete("/{memo_id}")
async def delete_memo(
    memo_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    memo = await get_or_404(db, Memo, memo_id, "Memo")
    await memo_service.delete_memo(db, memo)
    await notify_change(redis, Collection.MEMOS, Collection.LEDGER_ENTRIES)
    return {"message": "Memo deleted successfully", "id": memo_id}
