"""
Party master endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.models.party import Party
from roadledger.app.schemas.party import PartyCreate, PartyUpdate, PartyResponse, PartyListResponse
from roadledger.app.services.change_notifier import Collection, notify_change
from roadledger.app.services.masters import ensure_unique, get_or_404

router = APIRouter(prefix="/parties", tags=["Parties"])


@router.get("", response_model=PartyListResponse)
async def list_parties(
    search: Optional[str] = Query(None, description="Matches name, contact person or phone"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    """List parties ordered by name."""
    query = select(Party)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            Party.name.ilike(pattern),
            Party.contact.ilike(pattern),
            Party.phone.ilike(pattern),
        ))
    parties, total = await paginate(db, query.order_by(Party.name), page, page_size)
    return PartyListResponse(
        parties=[PartyResponse.model_validate(p) for p in parties],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{party_id}", response_model=PartyResponse)
async def get_party(party_id: int, db: AsyncSession = Depends(get_db)):
    party = await get_or_404(db, Party, party_id, "Party")
    return PartyResponse.model_validate(party)


@router.post("", response_model=PartyResponse, status_code=status.HTTP_201_CREATED)
async def create_party(
    party_data: PartyCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """
    Create a party.

    Party names are unique; a duplicate name is rejected with 400.
    """
    await ensure_unique(db, Party.name, party_data.name, "Party")
    party = Party(**party_data.model_dump())
    db.add(party)
    await db.commit()
    await db.refresh(party)

    await notify_change(redis, Collection.PARTIES)
    return PartyResponse.model_validate(party)


@router.put("/{party_id}", response_model=PartyResponse)
async def update_party(
    party_id: int,
    party_data: PartyUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    party = await get_or_404(db, Party, party_id, "Party")
    update_data = party_data.model_dump(exclude_unset=True)
    if update_data.get("name"):
        await ensure_unique(db, Party.name, update_data["name"], "Party", exclude_id=party.id)

    for field, value in update_data.items():
        setattr(party, field, value)
    await db.commit()
    await db.refresh(party)

    await notify_change(redis, Collection.PARTIES)
    return PartyResponse.model_validate(party)


@router.delete("/{party_id}")
async def delete_party(
    party_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    party = await get_or_404(db, Party, party_id, "Party")
    await db.delete(party)
    await db.commit()

    await notify_change(redis, Collection.PARTIES)
    return {"message": "Party deleted successfully", "id": party_id}
