"""
Vehicle master endpoints.

Ownership decides how memos post: own vehicles earn freight into the
vehicle ledger, market vehicles owe it to the supplier.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.redis_client import get_redis
from roadledger.app.db.pagination import paginate, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roadledger.app.db.session import get_db
from roadledger.app.models.enums import OwnershipType
from roadledger.app.models.vehicle import Vehicle
from roadledger.app.schemas.vehicle import VehicleCreate, VehicleUpdate, VehicleResponse, VehicleListResponse
from roadledger.app.services.change_notifier import Collection, notify_change
from roadledger.app.services.masters import ensure_unique, get_or_404

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.get("", response_model=VehicleListResponse)
async def list_vehicles(
    ownership_type: Optional[OwnershipType] = Query(None),
    search: Optional[str] = Query(None, description="Matches vehicle number, owner or driver"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    query = select(Vehicle)
    if ownership_type:
        query = query.where(Vehicle.ownership_type == ownership_type)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            Vehicle.vehicle_no.ilike(pattern),
            Vehicle.owner_name.ilike(pattern),
            Vehicle.driver_name.ilike(pattern),
        ))
    vehicles, total = await paginate(db, query.order_by(Vehicle.vehicle_no), page, page_size)
    return VehicleListResponse(
        vehicles=[VehicleResponse.model_validate(v) for v in vehicles],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(vehicle_id: int, db: AsyncSession = Depends(get_db)):
    vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")
    return VehicleResponse.model_validate(vehicle)


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """Register a vehicle. vehicle_no is unique after upper-casing."""
    await ensure_unique(db, Vehicle.vehicle_no, vehicle_data.vehicle_no, "Vehicle")
    vehicle = Vehicle(**vehicle_data.model_dump())
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)

    await notify_change(redis, Collection.VEHICLES)
    return VehicleResponse.model_validate(vehicle)


@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: int,
    vehicle_data: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """
    Update a vehicle.

    Changing ownership_type does not re-post memos already on the ledger.
    """
    vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")
    update_data = vehicle_data.model_dump(exclude_unset=True)
    if update_data.get("vehicle_no"):
        await ensure_unique(db, Vehicle.vehicle_no, update_data["vehicle_no"], "Vehicle", exclude_id=vehicle.id)

    for field, value in update_data.items():
        setattr(vehicle, field, value)
    await db.commit()
    await db.refresh(vehicle)

    await notify_change(redis, Collection.VEHICLES)
    return VehicleResponse.model_validate(vehicle)


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    vehicle = await get_or_404(db, Vehicle, vehicle_id, "Vehicle")
    await db.delete(vehicle)
    await db.commit()

    await notify_change(redis, Collection.VEHICLES)
    return {"message": "Vehicle deleted successfully", "id": vehicle_id}
