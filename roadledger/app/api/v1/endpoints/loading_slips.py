"""
Loading slip endpoints.

List rows carry the memo_number / bill_number attached to each slip.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.models.loading_slip import LoadingSlip
from roadledger.app.schemas.loading_slip import (
    LoadingSlipCreate,
    LoadingSlipUpdate,
    LoadingSlipResponse,
    LoadingSlipListResponse,
)
from roadledger.app.services import loading_slip_service
from roadledger.app.services.change_notifier import Collection, notify_change
from roadledger.app.services.masters import get_or_404

router = APIRouter(prefix="/loading-slips", tags=["Loading Slips"])


async def _with_references(db: AsyncSession, slips) -> list:
    refs = await loading_slip_service.slip_references(db, [s.id for s in slips])
    responses = []
    for slip in slips:
        memo_number, bill_number = refs[slip.id]
        response = LoadingSlipResponse.model_validate(slip)
        responses.append(response.model_copy(update={"memo_number": memo_number, "bill_number": bill_number}))
    return responses


@router.get("", response_model=LoadingSlipListResponse)
async def list_loading_slips(
    vehicle_no: Optional[str] = Query(None),
    party: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    search: Optional[str] = Query(None, description="Matches slip number, party or route"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    """List loading slips, newest first."""
    query = select(LoadingSlip)
    if vehicle_no:
        query = query.where(LoadingSlip.vehicle_no == vehicle_no.strip().upper())
    if party:
        query = query.where(LoadingSlip.party == party)
    if date_from:
        query = query.where(LoadingSlip.date >= date_from)
    if date_to:
        query = query.where(LoadingSlip.date <= date_to)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            LoadingSlip.slip_number.ilike(pattern),
            LoadingSlip.party.ilike(pattern),
            LoadingSlip.from_location.ilike(pattern),
            LoadingSlip.to_location.ilike(pattern),
        ))
    query = query.order_by(LoadingSlip.date.desc(), LoadingSlip.created_at.desc(), LoadingSlip.id.desc())
    slips, total = await paginate(db, query, page, page_size)
    return LoadingSlipListResponse(
        loading_slips=await _with_references(db, slips),
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{slip_id}", response_model=LoadingSlipResponse)
async def get_loading_slip(slip_id: int, db: AsyncSession = Depends(get_db)):
    slip = await get_or_404(db, LoadingSlip, slip_id, "Loading slip")
    return (await _with_references(db, [slip]))[0]


@router.post("", response_model=LoadingSlipResponse, status_code=status.HTTP_201_CREATED)
async def create_loading_slip(
    slip_data: LoadingSlipCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """Create a loading slip; balance is computed as freight - advance."""
    slip = await loading_slip_service.create_loading_slip(db, slip_data)
    await notify_change(redis, Collection.LOADING_SLIPS)
    return LoadingSlipResponse.model_validate(slip)


@router.put("/{slip_id}", response_model=LoadingSlipResponse)
async def update_loading_slip(
    slip_id: int,
    slip_data: LoadingSlipUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """
    Update a loading slip.

    Money fields are frozen once a memo or bill refers to the slip (400).
    """
    slip = await get_or_404(db, LoadingSlip, slip_id, "Loading slip")
    slip = await loading_slip_service.update_loading_slip(db, slip, slip_data.model_dump(exclude_unset=True))
    await notify_change(redis, Collection.LOADING_SLIPS)
    return (await _with_references(db, [slip]))[0]


@router.delete("/{slip_id}")
async def delete_loading_slip(
    slip_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """Delete an unreferenced loading slip (400 while a memo or bill refers to it)."""
    slip = await get_or_404(db, LoadingSlip, slip_id, "Loading slip")
    await loading_slip_service.delete_loading_slip(db, slip)
    await notify_change(redis, Collection.LOADING_SLIPS)
    return {"message": "Loading slip deleted successfully", "id": slip_id}
