"""
Lookups shared by the entity services: master records by name or number,
uniqueness checks and id-or-404 fetches.
"""

from typing import Any, Optional, Type

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from roadledger.app.core.exceptions import DuplicateResourceError, ResourceNotFoundError
from roadledger.app.models.party import Party
from roadledger.app.models.supplier import Supplier
from roadledger.app.models.vehicle import Vehicle


async def get_or_404(db: AsyncSession, model: Type, resource_id: int, resource: str):
    instance = await db.get(model, resource_id)
    if instance is None:
        raise ResourceNotFoundError(resource, resource_id)
    return instance


async def ensure_unique(
    db: AsyncSession,
    column,
    value: Any,
    resource: str,
    exclude_id: Optional[int] = None,
) -> None:
    """
    Raise DuplicateResourceError when another row already holds value.

    Args:
        column: Mapped column, e.g. Bill.bill_number
        exclude_id: Row being updated, ignored in the check
    """
    model = column.class_
    query = select(model.id).where(column == value)
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    result = await db.execute(query.limit(1))
    if result.scalar_one_or_none() is not None:
        raise DuplicateResourceError(resource, column.key, value)


async def find_party_by_name(db: AsyncSession, name: Optional[str]) -> Optional[Party]:
    """Case-insensitive exact match on the party name."""
    if not name:
        return None
    result = await db.execute(select(Party).where(func.lower(Party.name) == name.strip().lower()).limit(1))
    return result.scalar_one_or_none()


async def find_supplier_by_name(db: AsyncSession, name: Optional[str]) -> Optional[Supplier]:
    if not name:
        return None
    result = await db.execute(select(Supplier).where(func.lower(Supplier.name) == name.strip().lower()).limit(1))
    return result.scalar_one_or_none()


async def find_vehicle(db: AsyncSession, vehicle_no: Optional[str]) -> Optional[Vehicle]:
    if not vehicle_no:
        return None
    result = await db.execute(select(Vehicle).where(Vehicle.vehicle_no == vehicle_no.strip().upper()))
    return result.scalar_one_or_none()
